from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from dmi.io.writer.write_mode import WriteModeType


class WriteOutcome(str, Enum):
    """Which path a write took."""

    PRIMARY = "primary"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclass
class WriteResult:
    """Structured response for a write-mode reconciliation."""

    outcome: WriteOutcome
    mode: WriteModeType
    rows_affected: int = 0
    statements: List[str] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        return self.outcome is not WriteOutcome.FAILED
