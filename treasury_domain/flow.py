"""Guided-flow position: Connect -> Analyze -> Allocate -> Monitor.

Forward moves can be gated; backward moves never are. Gate inputs are passed
in by the caller so this module stays free of session state.
"""
from __future__ import annotations

from enum import IntEnum

__all__ = ["FlowStep", "GuidedFlow"]


class FlowStep(IntEnum):
    CONNECT = 1
    ANALYZE = 2
    ALLOCATE = 3
    MONITOR = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()


class GuidedFlow:
    def __init__(self, step: FlowStep = FlowStep.CONNECT) -> None:
        self._step = FlowStep(step)

    @property
    def step(self) -> FlowStep:
        return self._step

    @staticmethod
    def can_leave(step: FlowStep, *, connected: bool, approval_satisfied: bool) -> bool:
        if step is FlowStep.CONNECT:
            return connected
        if step is FlowStep.ALLOCATE:
            return approval_satisfied
        return True

    def next(self, *, connected: bool, approval_satisfied: bool) -> bool:
        """Advance one step if the current step may be left. Returns True on a move."""
        if self._step is FlowStep.MONITOR:
            return False
        if not self.can_leave(self._step, connected=connected, approval_satisfied=approval_satisfied):
            return False
        self._step = FlowStep(self._step + 1)
        return True

    def back(self) -> bool:
        if self._step is FlowStep.CONNECT:
            return False
        self._step = FlowStep(self._step - 1)
        return True

    def go_to(self, target: FlowStep | int | str, *, connected: bool, approval_satisfied: bool) -> bool:
        """Jump to *target*; forward jumps must pass every gate they cross."""
        dest = _coerce_step(target)
        for step in FlowStep:
            if self._step <= step < dest and not self.can_leave(
                step, connected=connected, approval_satisfied=approval_satisfied
            ):
                return False
        self._step = dest
        return True

    def force_monitor(self) -> None:
        self._step = FlowStep.MONITOR

    def restart(self) -> None:
        self._step = FlowStep.CONNECT


def _coerce_step(value: FlowStep | int | str) -> FlowStep:
    if isinstance(value, str):
        try:
            return FlowStep[value.upper()]
        except KeyError as exc:
            raise ValueError(f"unknown flow step: {value!r}") from exc
    return FlowStep(value)
