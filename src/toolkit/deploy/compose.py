"""Docker Compose generation.

Renders ``docker-compose.yaml`` from :class:`ServiceSpec` objects.
Services are emitted dependencies-first; every ``depends_on`` entry must
name another service in the same composition and the dependency graph
must be acyclic, so a generated file can always be brought up with a
plain ``docker compose up``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from toolkit.core.errors import ConfigError
from toolkit.core.logging import get_logger
from toolkit.deploy.specs import ServiceSpec

logger = get_logger(__name__)

COMPOSE_VERSION = "3"


class _Dumper(yaml.SafeDumper):
    """SafeDumper that writes multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.Node:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_Dumper.add_representer(str, _represent_str)


def _yaml_dumps(data: dict[str, Any]) -> str:
    """Serialize dict to YAML, keeping insertion order."""
    return yaml.dump(data, Dumper=_Dumper, default_flow_style=False, sort_keys=False, allow_unicode=True)


def order_services(services: list[ServiceSpec]) -> list[ServiceSpec]:
    """Return *services* with every service after its dependencies.

    Independent services keep their input order.

    Raises:
        ConfigError: duplicate names, a dependency outside *services*,
            or a dependency cycle.
    """
    by_name: dict[str, ServiceSpec] = {}
    for spec in services:
        if spec.name in by_name:
            raise ConfigError(f"Duplicate service {spec.name!r}")
        by_name[spec.name] = spec

    for spec in services:
        for dep in spec.depends_on:
            if dep not in by_name:
                raise ConfigError(f"Service {spec.name!r} depends on unknown service {dep!r}")
            if dep == spec.name:
                raise ConfigError(f"Service {spec.name!r} depends on itself")

    ordered: list[ServiceSpec] = []
    placed: set[str] = set()
    remaining = list(services)
    while remaining:
        ready = [s for s in remaining if all(dep in placed for dep in s.depends_on)]
        if not ready:
            cycle = ", ".join(s.name for s in remaining)
            raise ConfigError(f"Dependency cycle between services: {cycle}")
        for spec in ready:
            ordered.append(spec)
            placed.add(spec.name)
        remaining = [s for s in remaining if s.name not in placed]
    return ordered


def _service_dict(spec: ServiceSpec) -> dict[str, Any]:
    service: dict[str, Any] = {"image": spec.image}
    if spec.shm_size:
        service["shm_size"] = spec.shm_size
    if spec.ports:
        service["ports"] = list(spec.ports)
    if spec.volumes:
        service["volumes"] = list(spec.volumes)
    if spec.environment:
        service["environment"] = [f"{key}={value}" for key, value in spec.environment.items()]
    if spec.depends_on:
        service["depends_on"] = list(spec.depends_on)
    service["restart"] = spec.restart
    return service


def compose_dict(services: list[ServiceSpec]) -> dict[str, Any]:
    """The composition as a plain dict, dependencies first."""
    return {
        "version": COMPOSE_VERSION,
        "services": {spec.name: _service_dict(spec) for spec in order_services(services)},
    }


def generate_compose(services: list[ServiceSpec]) -> str:
    """Generate a docker-compose YAML for *services*.

    Returns
    -------
    str
        YAML string ready to write to a file.
    """
    return _yaml_dumps(compose_dict(services))


def write_compose_file(content: str, output_path: str | Path = "docker-compose.yaml") -> Path:
    """Write compose YAML to *output_path* and return the path."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("compose_written", path=str(path))
    return path
