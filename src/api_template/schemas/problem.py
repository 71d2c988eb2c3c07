"""Problem response schemas (RFC 7807).

Every error response uses the same document:
{"type": "...", "title": "...", "status": ..., "detail": "...", "instance": "..."}.
Fields that are None are left out when serialized.
"""

from pydantic import BaseModel, Field

DEFAULT_PROBLEM_TYPE = "/"
VALIDATION_PROBLEM_TYPE = "https://tools.ietf.org/html/rfc4918#section-11.2"
VALIDATION_PROBLEM_DETAIL = "Please refer to the errors property for additional details."

VALIDATION_PROBLEM_EXAMPLE: dict[str, object] = {
    "type": VALIDATION_PROBLEM_TYPE,
    "title": "2 validation errors occurred.",
    "status": 422,
    "detail": VALIDATION_PROBLEM_DETAIL,
    "instance": "/example",
    "errors": {"Property1": ["Error message 1", "Error message 2"]},
}


class ProblemDetails(BaseModel):
    """Structured error document returned by every failed request."""

    model_config = {"frozen": True}

    type: str = Field(DEFAULT_PROBLEM_TYPE, description="URI identifying the error category")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: str | None = Field(None, description="Longer explanation, when available")
    instance: str = Field(..., description="Request path that produced the error")


class ValidationProblemDetails(ProblemDetails):
    """Problem document for request validation failures.

    The JSON schema carries a populated example (and default) so the
    generated API documentation shows what the ``errors`` map looks like.
    """

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": VALIDATION_PROBLEM_EXAMPLE,
            "default": VALIDATION_PROBLEM_EXAMPLE,
        },
    }

    errors: dict[str, list[str]] = Field(
        default_factory=dict, description="Error messages keyed by field name"
    )
