"""Return envelope shared by every service operation.

Findings travel inside ``data``; they never make a result fail. A result
is ``ok=False`` only when the operation could not run at all, e.g. an
unloadable schema or a scan root that is not a directory. The CLI maps
the two cases to different exit codes.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ServiceError(BaseModel):
    """Why an operation could not run: a stable code, a message, context."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service call (``check``, ``graph``, ``validate_schema``).

    ``warnings`` collects non-fatal problems such as a plugin hook that
    raised; ``error`` is set exactly when ``ok`` is False.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def success(
        cls, op: str, data: dict[str, Any], warnings: Iterable[str] = ()
    ) -> ServiceResult:
        return cls(ok=True, op=op, data=data, warnings=list(warnings))

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
