from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from shared_libs.config_models.pin_registry import PinConflictError, PinReport


class BoardConfigError(Exception):
    """Base class for every error the configuration builder reports."""


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str
    type: str

    def __str__(self) -> str:
        location = self.path or "<root>"
        return f"{location}: {self.message} [{self.type}]"


# Tags pydantic inserts into error locations for the tagged unions.
SHAPE_TAGS = ("current", "legacy")
SENSOR_TAGS = ("i2c", "uart", "analog")


def issue_path(loc: Sequence[Any]) -> str:
    """Dotted record path for a pydantic error location, without union tags."""
    parts = list(loc)
    if parts and parts[0] in SHAPE_TAGS:
        parts = parts[1:]
    kept: List[Any] = []
    for i, part in enumerate(parts):
        # sensors.<index>.<tag>
        if part in SENSOR_TAGS and i >= 2 and isinstance(parts[i - 1], int) and parts[i - 2] == "sensors":
            continue
        kept.append(part)
    return ".".join(str(part) for part in kept)


class StructuralValidationError(BoardConfigError):
    """A record does not match its schema (shape, type, enum or range)."""

    def __init__(self, target: str, issues: Sequence[ValidationIssue], source: Optional[str] = None):
        self.target = target
        self.issues: List[ValidationIssue] = list(issues)
        self.source = source
        where = f" in '{source}'" if source else ""
        lines = [f"{target} validation failed{where} ({len(self.issues)} issue(s)):"]
        lines.extend(f"  - {issue}" for issue in self.issues)
        super().__init__("\n".join(lines))

    @classmethod
    def from_pydantic(cls, target: str, error: ValidationError, source: Optional[str] = None) -> "StructuralValidationError":
        issues = [
            ValidationIssue(
                path=issue_path(err["loc"]),
                message=err["msg"],
                type=err["type"],
            )
            for err in error.errors()
        ]
        return cls(target, issues, source=source)


class ConstraintViolationError(BoardConfigError):
    """A cross-field refinement failed; carries the complete pin report."""

    def __init__(self, report: PinReport, board_id: Optional[str] = None):
        self.report = report
        self.board_id = board_id
        header = f"Pin conflicts on board '{board_id}'" if board_id else "Pin conflicts detected"
        lines = [f"{header}:"]
        for conflict in report.conflicts:
            lines.append(f"  - GPIO {conflict.pin}: {', '.join(conflict.components)}")
        super().__init__("\n".join(lines))


class NotFoundError(BoardConfigError):
    def __init__(self, kind: str, identifier: str, detail: Optional[str] = None):
        self.kind = kind
        self.identifier = identifier
        message = f"{kind} not found: {identifier}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class CancellationSignal(BoardConfigError):
    """The user aborted an interactive step. Not a failure."""


def find_pin_conflict(error: ValidationError) -> Optional[PinConflictError]:
    """Return the pin refinement failure wrapped inside a pydantic error, if any."""
    for err in error.errors():
        ctx: Any = err.get("ctx") or {}
        cause = ctx.get("error")
        if isinstance(cause, PinConflictError):
            return cause
    return None
