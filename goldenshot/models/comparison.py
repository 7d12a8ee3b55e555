"""Comparison result data structures produced by the comparator."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from goldenshot.errors import DiffWriteError, MismatchError, OracleError


class ComparisonKind(str, Enum):
    PASS = "pass"
    UPDATED = "updated"
    MISMATCH = "mismatch"
    MISMATCH_WITH_DIFF = "mismatch_with_diff"
    ORACLE_ERROR = "oracle_error"
    DIFF_ERROR = "diff_error"


class ComparisonResult(BaseModel):
    """Outcome of one compare call."""
    kind: ComparisonKind
    detail: str  # human-readable verdict
    golden_path: str
    diff_path: Optional[str] = None
    current_path: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.kind in (ComparisonKind.PASS, ComparisonKind.UPDATED)

    @property
    def artifact_paths(self) -> list[str]:
        return [p for p in (self.diff_path, self.current_path) if p]

    def raise_for_failure(self) -> None:
        """Raise the matching exception unless the result is a pass or an update."""
        match self.kind:
            case ComparisonKind.PASS | ComparisonKind.UPDATED:
                return
            case ComparisonKind.MISMATCH | ComparisonKind.MISMATCH_WITH_DIFF:
                raise MismatchError(self)
            case ComparisonKind.DIFF_ERROR:
                raise DiffWriteError(self)
            case ComparisonKind.ORACLE_ERROR:
                raise OracleError(self.detail, result=self)
