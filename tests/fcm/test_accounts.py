"""Tests for service-account loading."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from toolkit.core.errors import ConfigError
from toolkit.fcm.accounts import FCM_SCOPE, ServiceAccount, ServiceAccountRegistry, load_service_accounts


def _key(project_id: str) -> dict:
    return {
        "type": "service_account",
        "project_id": project_id,
        "client_email": f"firebase-adminsdk@{project_id}.iam.gserviceaccount.com",
        "private_key": "unused-in-tests",
    }


class TestLoadServiceAccounts:
    def test_missing_directory_gives_empty_registry(self, tmp_path):
        registry = load_service_accounts(tmp_path / "nope", extra_projects=["extra"])
        assert len(registry) == 0
        assert registry.projects == ["extra"]

    def test_loads_json_files_and_skips_bad_ones(self, tmp_path):
        (tmp_path / "prod.json").write_text(json.dumps(_key("app-prod")))
        (tmp_path / "staging.json").write_text(json.dumps(_key("app-staging")))
        (tmp_path / "broken.json").write_text("{not json")
        (tmp_path / "list.json").write_text("[1, 2]")
        (tmp_path / "no-project.json").write_text(json.dumps({"type": "service_account"}))
        (tmp_path / "notes.txt").write_text("ignored")

        registry = load_service_accounts(tmp_path)

        assert registry.projects == ["app-prod", "app-staging"]
        assert "app-prod" in registry
        assert registry.get("app-prod").client_email.startswith("firebase-adminsdk@")
        assert registry.get("broken") is None


class TestServiceAccountRegistry:
    def test_extra_projects_allowed_without_credentials(self):
        registry = ServiceAccountRegistry([ServiceAccount(_key("a"))], extra_projects=["b", ""])
        assert registry.projects == ["a", "b"]
        assert "b" in registry
        assert registry.get("b") is None
        assert [acc.project_id for acc in registry] == ["a"]


class TestServiceAccount:
    def test_requires_project_id(self):
        with pytest.raises(ConfigError, match="project_id"):
            ServiceAccount({"type": "service_account"})

    @patch("toolkit.fcm.accounts.service_account.Credentials.from_service_account_info")
    def test_access_token_refreshes_only_when_invalid(self, from_info):
        credentials = MagicMock()
        credentials.valid = False
        credentials.token = "ya29.token"

        def _refresh(request):
            credentials.valid = True

        credentials.refresh.side_effect = _refresh
        from_info.return_value = credentials

        account = ServiceAccount(_key("app"))
        assert account.access_token() == "ya29.token"
        assert account.access_token() == "ya29.token"

        from_info.assert_called_once_with(_key("app"), scopes=[FCM_SCOPE])
        credentials.refresh.assert_called_once()
