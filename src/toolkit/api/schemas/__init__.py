"""Request and response models for the HTTP API."""

from toolkit.api.schemas.common import ProblemDetail, SuccessResponse

__all__ = ["ProblemDetail", "SuccessResponse"]
