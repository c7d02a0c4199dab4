from typing import Optional


class TriageError(Exception):
    """
    Base class for every failure the proxy converts into a response envelope.

    The `message` is what the caller sees, so it must never contain stack
    details or internal hostnames.
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ClientInputError(TriageError):
    """Bad method or invalid body. Echoed verbatim to the caller."""

    status_code = 400


class UpstreamUnavailableError(TriageError):
    """
    The remote classifier could not produce a result: missing configuration,
    connection failure, timeout or a non-2xx answer.
    """

    status_code = 502


class InternalError(TriageError):
    status_code = 500

    def __init__(self, message: str = "Internal error while classifying the ticket.") -> None:
        super().__init__(message)
