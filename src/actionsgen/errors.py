# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GenerationError(Exception):
    """
    Structured generation error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    kind: str
    workflow: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}", f"workflow={self.workflow}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class MisconfigurationError(GenerationError, AssertionError):
    """Raised when a descriptor breaks a contract its author must uphold."""
