"""Mapping from failure kinds to problem documents.

Two shapes only:

- malformed request: "Invalid request.", the carried status, the message as detail
- anything else: "An unexpected error occurred.", 500, detail only in diagnostic mode
"""

from fastapi.responses import JSONResponse

from api_template.failures import ClientRequestMalformed, Failure, Unexpected
from api_template.responses import ContentType, write_json
from api_template.schemas.problem import DEFAULT_PROBLEM_TYPE, ProblemDetails

INVALID_REQUEST_TITLE = "Invalid request."
UNEXPECTED_ERROR_TITLE = "An unexpected error occurred."


def map_failure(failure: Failure, instance: str, *, diagnostic: bool) -> ProblemDetails:
    """Build the problem document for ``failure`` raised while serving ``instance``.

    ``diagnostic`` allows internal exception text into ``detail`` for
    unexpected failures; keep it off outside development.
    """
    match failure:
        case ClientRequestMalformed(status=status, message=message):
            return ProblemDetails(
                type=DEFAULT_PROBLEM_TYPE,
                title=INVALID_REQUEST_TITLE,
                status=status,
                detail=message,
                instance=instance,
            )
        case Unexpected(description=description):
            return ProblemDetails(
                type=DEFAULT_PROBLEM_TYPE,
                title=UNEXPECTED_ERROR_TITLE,
                status=500,
                detail=description if diagnostic else None,
                instance=instance,
            )


def problem_response(
    problem: ProblemDetails, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Write ``problem`` as an application/problem+json response."""
    return write_json(
        problem,
        status_code=problem.status,
        media_type=ContentType.PROBLEM_JSON,
        headers=headers,
    )
