"""GitHub Actions workflow generation for the pull-request gate.

Two jobs run in parallel on every pull request against the configured
branches:

``test``
    install Python and the project, create the embedded SQLite database
    with ``toolkit db setup``, then byte-compile and run pytest with
    ``DATABASE_URL`` pointing at it.
``build``
    build the container image with buildx; nothing is pushed.

``shell: bash`` makes Actions run each step with ``-eo pipefail``, so
the first failing command fails the job.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from toolkit.core.logging import get_logger
from toolkit.deploy.compose import _yaml_dumps
from toolkit.deploy.specs import WorkflowSpec

logger = get_logger(__name__)

CHECKOUT_ACTION = "actions/checkout@v4"
SETUP_PYTHON_ACTION = "actions/setup-python@v5"
SETUP_BUILDX_ACTION = "docker/setup-buildx-action@v3"

_BASH_DEFAULTS = {"run": {"shell": "bash"}}


def _test_job(spec: WorkflowSpec) -> dict[str, Any]:
    return {
        "runs-on": spec.runner,
        "defaults": _BASH_DEFAULTS,
        "steps": [
            {"uses": CHECKOUT_ACTION},
            {
                "name": "Set up Python",
                "uses": SETUP_PYTHON_ACTION,
                "with": {"python-version": spec.python_version},
            },
            {"name": "Install", "run": spec.install_command},
            {
                "name": "Setup database",
                "run": f"toolkit db setup --database-url={spec.database_url}",
            },
            {
                "name": "Build and test",
                "run": (
                    f"export DATABASE_URL={spec.database_url}\n"
                    f"{spec.build_command}\n"
                    f"{spec.test_command}\n"
                ),
            },
        ],
    }


def _build_job(spec: WorkflowSpec) -> dict[str, Any]:
    return {
        "runs-on": spec.runner,
        "defaults": _BASH_DEFAULTS,
        "steps": [
            {"uses": CHECKOUT_ACTION},
            {"uses": SETUP_BUILDX_ACTION},
            {"run": f"docker build -t $IMAGE_NAME:{spec.image_tag} ."},
        ],
    }


def workflow_dict(spec: WorkflowSpec) -> dict[str, Any]:
    """The workflow as a plain dict."""
    return {
        "name": spec.name,
        "on": {"pull_request": {"branches": list(spec.branches)}},
        "env": {"IMAGE_NAME": spec.image_name, "DOCKER_BUILDKIT": 1},
        "jobs": {"test": _test_job(spec), "build": _build_job(spec)},
    }


def generate_pr_workflow(spec: WorkflowSpec | None = None) -> str:
    """Render the pull-request gate as GitHub Actions YAML."""
    return _yaml_dumps(workflow_dict(spec or WorkflowSpec()))


def write_workflow_file(
    content: str,
    output_path: str | Path = ".github/workflows/check-backend.yaml",
) -> Path:
    """Write workflow YAML to *output_path* and return the path."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("workflow_written", path=str(path))
    return path
