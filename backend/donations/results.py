from dataclasses import dataclass, field
from typing import Any, List, Optional

OK = "ok"
INVALID = "invalid"
NOT_FOUND = "not_found"
FORBIDDEN = "forbidden"
CONFLICT = "conflict"

HTTP_STATUS = {OK: 200, INVALID: 400, FORBIDDEN: 403, NOT_FOUND: 404, CONFLICT: 409}


@dataclass
class TransitionResult:
    """
    Outcome of a lifecycle/impact operation. Business-rule violations come back
    as a non-ok result carrying a user-facing message; they are never raised.
    """
    outcome: str
    message: str = ""
    donation: Any = None
    data: Any = None
    errors: List[dict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome == OK

    @property
    def http_status(self) -> int:
        return HTTP_STATUS[self.outcome]

    @classmethod
    def success(cls, message: str = "", donation=None, data=None) -> "TransitionResult":
        return cls(OK, message, donation=donation, data=data)

    @classmethod
    def invalid(cls, message: str, errors: Optional[List[dict]] = None) -> "TransitionResult":
        return cls(INVALID, message, errors=errors or [])

    @classmethod
    def not_found(cls, message: str = "Donation not found") -> "TransitionResult":
        return cls(NOT_FOUND, message)

    @classmethod
    def forbidden(cls, message: str) -> "TransitionResult":
        return cls(FORBIDDEN, message)

    @classmethod
    def conflict(cls, message: str) -> "TransitionResult":
        return cls(CONFLICT, message)
