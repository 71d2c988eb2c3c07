"""Classification of failures that reach the terminal exception handler.

The handler catches a raw exception, turns it into one of two failure kinds
here, and the mapper in problem_details.py matches on the kind. Nothing
downstream inspects exception types again.
"""

import traceback
from dataclasses import dataclass
from typing import TypeAlias

from starlette.exceptions import HTTPException

from api_template.exceptions import BadHttpRequestError


@dataclass(frozen=True, slots=True)
class ClientRequestMalformed:
    """The request was rejected before application logic ran."""

    status: int
    message: str


@dataclass(frozen=True, slots=True)
class Unexpected:
    """Anything else. ``description`` holds type, message and traceback."""

    description: str


Failure: TypeAlias = ClientRequestMalformed | Unexpected


def classify(exc: BaseException) -> Failure:
    """Turn a caught exception into a failure kind."""
    if isinstance(exc, BadHttpRequestError):
        return ClientRequestMalformed(status=exc.status_code, message=exc.message)
    # HTTPExceptions raised inside routes are answered by Starlette; only ones
    # raised from middleware get this far.
    if isinstance(exc, HTTPException) and 400 <= exc.status_code < 500:
        return ClientRequestMalformed(status=exc.status_code, message=exc.detail)
    return Unexpected(description="".join(traceback.format_exception(exc)))
