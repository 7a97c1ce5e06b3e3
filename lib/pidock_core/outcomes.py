from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OutcomeStatus(str, Enum):
    STARTED = "started"
    ALREADY_RUNNING = "already_running"
    DONE = "done"
    NOT_FOUND = "not_found"
    FAILED = "failed"


_OK_STATUSES = {OutcomeStatus.STARTED, OutcomeStatus.ALREADY_RUNNING, OutcomeStatus.DONE}


@dataclass(frozen=True)
class ServiceOutcome:
    identifier: str
    status: OutcomeStatus
    exit_code: int | None = None
    output: str = ""
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in _OK_STATUSES


def all_ok(outcomes: list[ServiceOutcome]) -> bool:
    return all(o.ok for o in outcomes)


def ordered_selection(identifiers) -> list[str]:
    """De-duplicate while keeping the order the operator picked."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in identifiers:
        value = str(getattr(raw, "value", raw)).strip()
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
