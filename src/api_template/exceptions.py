"""Exceptions raised by services and middleware.

Services raise the domain exceptions to signal business-rule violations;
handlers registered in pipeline.py translate them into problem+json
responses. BadHttpRequestError is raised before routing when a request
is malformed and is converted by the terminal exception handler.
"""


class DomainError(Exception):
    """Base class for all domain exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} with id {identifier} not found")


class ConflictError(DomainError):
    """Raised when an operation conflicts with existing state (e.g. duplicate)."""


class BadHttpRequestError(Exception):
    """Raised when a request is rejected before it reaches application logic.

    Carries the status code to answer with (400, 414, 431, ...) as a public
    attribute so the exception handler never has to guess it.
    """

    def __init__(self, message: str, status_code: int = 400) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)
