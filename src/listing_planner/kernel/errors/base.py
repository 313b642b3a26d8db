"""Root of the listing-planner error hierarchy.

Every error that crosses a layer boundary carries a stable ``code`` slug
(the HTTP body ``code`` and a log field), a human ``message`` and a
JSON-safe ``detail`` mapping.  The driver-level ``cause`` is chained for
tracebacks but left out of client-facing payloads.
"""

from __future__ import annotations

import json
from typing import Any

_SCALARS = (str, int, float, bool)


class BaseError(Exception):
    """Base for planner, storage and configuration errors.

    Args:
        message: Human-readable description.
        code: Machine-readable slug (defaults to ``default_code``).
        detail: Extra context such as the offending parameter or collection.
        cause: Lower-level exception that triggered this error.
    """

    default_code: str = "base_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = dict(detail or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self, *, include_cause: bool = True) -> dict[str, Any]:
        """Serialise to a plain dict.

        HTTP error bodies pass ``include_cause=False``: the driver's text may
        name hosts or credentials and belongs in the logs only.
        """
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "detail": dict(self.detail),
        }
        if include_cause and self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload

    def log_fields(self) -> dict[str, Any]:
        """Flat key-values for a structlog event: ``code`` plus scalar detail entries."""
        fields: dict[str, Any] = {"code": self.code}
        for key, value in self.detail.items():
            if value is None or isinstance(value, _SCALARS):
                fields.setdefault(key, value)
        if self.cause is not None:
            fields["cause"] = type(self.cause).__name__
        return fields


__all__ = ["BaseError"]
