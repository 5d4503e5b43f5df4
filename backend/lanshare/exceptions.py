"""
Error taxonomy shared by the REST surface and the live channel.

Each error carries the HTTP status it is rendered with; the live channel
reports the same errors as ``error`` events without closing the socket.
"""


class LanShareError(Exception):
    status_code = 500

    def __init__(self, detail: str, field: str | None = None):
        super().__init__(detail)
        self.detail = detail
        self.field = field

    def to_dict(self) -> dict:
        return {"detail": self.detail, "field": self.field}


class ValidationError(LanShareError):
    """Malformed or missing input."""
    status_code = 400


class NotFoundError(LanShareError):
    """Referenced id does not exist."""
    status_code = 404


class PayloadTooLargeError(LanShareError):
    """Upload exceeds the configured size limit."""
    status_code = 413


class StorageError(LanShareError):
    """Content-area failure. The client only ever sees a generic message."""
    status_code = 500

    def to_dict(self) -> dict:
        return {"detail": "Storage failure", "field": None}


def field_from_errors(errors: list[dict]) -> str | None:
    """Name of the first offending field in a list of pydantic error dicts."""
    for error in errors:
        names = [part for part in error.get("loc", ()) if isinstance(part, str)]
        names = [n for n in names if n not in ("body", "query", "path", "data")]
        if names:
            return names[-1]
    return None
