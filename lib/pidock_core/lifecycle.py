from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from .errors import AmbiguousSelection, ExternalCommandFailure, NotFound, RuntimeUnavailable
from .outcomes import OutcomeStatus, ServiceOutcome, ordered_selection
from .runtime import CommandResult, ContainerInfo, ContainerRuntime

log = logging.getLogger(__name__)

DEFAULT_LOG_LINES = 100


class Action(str, Enum):
    START = "start"
    STOP = "stop"
    RESTART = "restart"
    REMOVE = "remove"


class LifecycleController:
    def __init__(self, runtime: ContainerRuntime):
        self._runtime = runtime

    def _require_runtime(self) -> None:
        if not self._runtime.available():
            raise RuntimeUnavailable("Docker is not available. Install Docker or start the daemon.")

    def list(self) -> list[ContainerInfo]:
        self._require_runtime()
        return self._runtime.containers()

    def act(self, action: Action | str, identifiers: Iterable[str]) -> list[ServiceOutcome]:
        """Run one action over several containers.

        ``remove`` deletes the container unconditionally; callers are
        expected to have confirmed with the operator first.
        """
        action = Action(action)
        self._require_runtime()
        known = {item.name for item in self._runtime.containers()}
        outcomes: list[ServiceOutcome] = []
        for name in ordered_selection(identifiers):
            if name not in known:
                outcomes.append(
                    ServiceOutcome(identifier=name, status=OutcomeStatus.NOT_FOUND, message=str(NotFound(name)))
                )
                continue
            log.info("%s container: %s", action.value, name)
            result = self._dispatch(action, name)
            if result.ok:
                outcomes.append(ServiceOutcome(identifier=name, status=OutcomeStatus.DONE, exit_code=0, output=result.output))
            else:
                log.error("%s %s failed with exit code %s", action.value, name, result.exit_code)
                outcomes.append(
                    ServiceOutcome(
                        identifier=name,
                        status=OutcomeStatus.FAILED,
                        exit_code=result.exit_code,
                        output=result.output,
                        message=f"docker {action.value} exited with {result.exit_code}",
                    )
                )
        return outcomes

    def _dispatch(self, action: Action, name: str) -> CommandResult:
        if action is Action.START:
            return self._runtime.start(name)
        if action is Action.STOP:
            return self._runtime.stop(name)
        if action is Action.RESTART:
            return self._runtime.restart(name)
        return self._runtime.remove(name)

    def logs(self, identifiers: Iterable[str], lines: int = DEFAULT_LOG_LINES) -> str:
        targets = ordered_selection(identifiers)
        if len(targets) != 1:
            raise AmbiguousSelection("Select exactly one container to view logs.")
        name = targets[0]
        self._require_runtime()
        if name not in {item.name for item in self._runtime.containers()}:
            raise NotFound(name)
        result = self._runtime.logs(name, lines)
        if not result.ok:
            raise ExternalCommandFailure(result.exit_code, result.output, f"docker logs {name} failed")
        return result.output
