"""Manual approval step in front of sweep execution.

``approved`` is only ever True between an explicit :meth:`ApprovalGate.approve`
and the next required-toggle or executed sweep. Both resets are named
transitions here so call sites never assign the flag directly.
"""
from __future__ import annotations

from dataclasses import dataclass

__all__ = ["ApprovalGate"]


@dataclass(slots=True)
class ApprovalGate:
    required: bool = True
    approved: bool = False

    def set_required(self, required: bool) -> None:
        self.required = bool(required)
        self.approved = False

    def approve(self) -> bool:
        """Grant approval. No-op when approval is not required."""
        if self.required:
            self.approved = True
        return self.approved

    def reset_after_sweep(self) -> None:
        self.approved = False

    def is_satisfied(self) -> bool:
        return not self.required or self.approved
