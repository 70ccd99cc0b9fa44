"""Tests for the pull-request workflow generator."""

from __future__ import annotations

import yaml

from toolkit.deploy import WorkflowSpec, generate_pr_workflow, write_workflow_file


def _load(spec=None):
    return yaml.safe_load(generate_pr_workflow(spec))


class TestTrigger:
    def test_pull_requests_to_main_only(self):
        doc = _load()
        assert doc["on"] == {"pull_request": {"branches": ["main"]}}

    def test_custom_branches(self):
        doc = _load(WorkflowSpec(branches=["main", "release"]))
        assert doc["on"]["pull_request"]["branches"] == ["main", "release"]


class TestJobs:
    def test_two_parallel_jobs(self):
        jobs = _load()["jobs"]
        assert set(jobs) == {"test", "build"}
        assert all("needs" not in job for job in jobs.values())

    def test_jobs_run_in_bash(self):
        for job in _load()["jobs"].values():
            assert job["defaults"]["run"]["shell"] == "bash"

    def test_test_job_sets_up_database_before_tests(self):
        steps = _load()["jobs"]["test"]["steps"]
        names = [s.get("name") for s in steps]
        assert names.index("Setup database") < names.index("Build and test")

        setup = steps[names.index("Setup database")]["run"]
        assert setup == "toolkit db setup --database-url=sqlite:toolkit.db"

        script = steps[names.index("Build and test")]["run"].splitlines()
        assert script == ["export DATABASE_URL=sqlite:toolkit.db", "python -m compileall -q src", "pytest -v"]

    def test_python_version(self):
        steps = _load(WorkflowSpec(python_version="3.13"))["jobs"]["test"]["steps"]
        setup = next(s for s in steps if s.get("name") == "Set up Python")
        assert setup["with"]["python-version"] == "3.13"

    def test_build_job_does_not_push(self):
        doc = _load()
        runs = [s["run"] for s in doc["jobs"]["build"]["steps"] if "run" in s]
        assert runs == ["docker build -t $IMAGE_NAME:latest ."]
        assert doc["env"] == {"IMAGE_NAME": "ghcr.io/mrsupiri/toolkit", "DOCKER_BUILDKIT": 1}


def test_write(tmp_path):
    path = write_workflow_file(generate_pr_workflow(), tmp_path / ".github" / "workflows" / "check.yaml")
    assert yaml.safe_load(path.read_text())["name"] == "PR Check"
