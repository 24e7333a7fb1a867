from typing import List, Optional, Tuple


class DomainError(Exception):
    """Base for errors translated into JSON responses at the HTTP boundary."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "status": self.status_code}


class ValidationError(DomainError):
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None,
                 errors: Optional[List[Tuple[str, str]]] = None):
        super().__init__(message)
        self.errors = list(errors) if errors else []
        if field is None and self.errors:
            field = self.errors[0][0]
        self.field = field
        if field and not self.errors:
            self.errors = [(field, message)]

    def to_dict(self) -> dict:
        out = super().to_dict()
        if self.errors:
            out["fields"] = {name: msg for name, msg in self.errors}
        return out


class MissingReferenceError(DomainError, ReferenceError):
    """A booking points at an event that does not exist."""

    status_code = 404


class ConflictError(DomainError):
    status_code = 409


class StoreConnectionError(DomainError, ConnectionError):
    """
    The store is unreachable or not configured. ``message`` is what clients
    see; driver output (hosts, users) goes in ``detail`` and only to logs.
    """

    status_code = 503

    def __init__(self, message: str = "Database connection failed", detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail or message
