"""Outcome of a single executed step."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class StepStatus(enum.IntEnum):
    """Status of a step; renders as its lowercase name."""

    SUCCESS = 0
    FAILURE = 1
    SKIPPED = 2

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


def parse_step_status(text: str) -> StepStatus:
    """Return the status named by ``text``; raise ValueError for unknown names."""
    for status in StepStatus:
        if str(status) == text:
            return status
    raise ValueError(f'invalid step status "{text}"')


@dataclass
class StepResult:
    """Outputs and result states recorded for a step."""

    outputs: dict[str, str] = field(default_factory=dict)
    conclusion: StepStatus = StepStatus.SUCCESS
    outcome: StepStatus = StepStatus.SUCCESS