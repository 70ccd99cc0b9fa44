"""Typed descriptions of the deployment and the CI gate."""

from __future__ import annotations

from dataclasses import dataclass, field

IMAGE_NAME = "ghcr.io/mrsupiri/toolkit"
APP_DIR = "/usr/src/app"


@dataclass(frozen=True)
class ServiceSpec:
    """One service of the docker-compose deployment."""

    name: str
    """Service identifier (e.g., 'toolkit')."""

    image: str
    """Registry image including tag."""

    ports: list[str] = field(default_factory=list)
    """Port mappings, ``"host:container"``."""

    volumes: list[str] = field(default_factory=list)
    """Bind mounts, ``"host_path:container_path"``."""

    environment: dict[str, str] = field(default_factory=dict)
    """Environment variables, rendered as ``KEY=value`` entries."""

    depends_on: list[str] = field(default_factory=list)
    """Services that must start before this one."""

    restart: str = "always"
    """Restart policy."""

    shm_size: str | None = None
    """Shared-memory size (Chrome needs more than Docker's 64m default)."""


TOOLKIT_SERVICE = ServiceSpec(
    name="toolkit",
    image=f"{IMAGE_NAME}:latest",
    ports=["3000:3000"],
    volumes=[
        f"./service_accounts:{APP_DIR}/service_accounts",
        f".env:{APP_DIR}/.env",
        f"./db:{APP_DIR}/db",
    ],
    depends_on=["selenium"],
)

SELENIUM_SERVICE = ServiceSpec(
    name="selenium",
    image="selenium/standalone-chrome:latest",
    shm_size="2g",
    # Largest value Selenium accepts: sessions never expire on their own
    environment={"SE_NODE_SESSION_TIMEOUT": "2147483646"},
)


def default_services() -> list[ServiceSpec]:
    """The production topology: toolkit plus its Chrome sidecar."""
    return [TOOLKIT_SERVICE, SELENIUM_SERVICE]


@dataclass(frozen=True)
class WorkflowSpec:
    """The pull-request gate."""

    name: str = "PR Check"
    branches: list[str] = field(default_factory=lambda: ["main"])
    image_name: str = IMAGE_NAME
    python_version: str = "3.12"
    runner: str = "ubuntu-latest"
    database_url: str = "sqlite:toolkit.db"
    """Embedded database created by ``toolkit db setup`` before the tests run."""
    install_command: str = 'pip install -e ".[test]"'
    build_command: str = "python -m compileall -q src"
    test_command: str = "pytest -v"
    image_tag: str = "latest"


DEFAULT_WORKFLOW = WorkflowSpec()
