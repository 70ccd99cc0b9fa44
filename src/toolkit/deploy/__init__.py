"""
Operational descriptors.

The CI gate (``.github/workflows/check-backend.yaml``) and the
two-container composition (``docker-compose.yaml``) are generated from
typed specs so the shipped files and the tests share one source of
truth::

    from toolkit.deploy import DEFAULT_WORKFLOW, default_services
    from toolkit.deploy import generate_compose, generate_pr_workflow

    compose_yaml = generate_compose(default_services())
    workflow_yaml = generate_pr_workflow(DEFAULT_WORKFLOW)
"""

from toolkit.deploy.compose import generate_compose, order_services, write_compose_file
from toolkit.deploy.specs import (
    DEFAULT_WORKFLOW,
    SELENIUM_SERVICE,
    TOOLKIT_SERVICE,
    ServiceSpec,
    WorkflowSpec,
    default_services,
)
from toolkit.deploy.workflow import generate_pr_workflow, write_workflow_file

__all__ = [
    "DEFAULT_WORKFLOW",
    "SELENIUM_SERVICE",
    "TOOLKIT_SERVICE",
    "ServiceSpec",
    "WorkflowSpec",
    "default_services",
    "generate_compose",
    "generate_pr_workflow",
    "order_services",
    "write_compose_file",
    "write_workflow_file",
]
