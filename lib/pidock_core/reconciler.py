from __future__ import annotations

import logging
from typing import Iterable

from .catalog import ServiceId, get_definition
from .errors import ExternalCommandFailure, GenerationFailure, RuntimeUnavailable, UnknownService
from .outcomes import OutcomeStatus, ServiceOutcome, ordered_selection
from .resolver import CatalogResolver
from .runtime import ContainerRuntime, ServiceState

log = logging.getLogger(__name__)


class Reconciler:
    def __init__(self, resolver: CatalogResolver, runtime: ContainerRuntime):
        self._resolver = resolver
        self._runtime = runtime

    def apply(self, selection: Iterable[str | ServiceId]) -> list[ServiceOutcome]:
        """Bring up every selected service that is not already running.

        Services are handled one by one in selection order; a failure is
        recorded for its identifier and the rest of the batch still runs.
        """
        if not self._runtime.available():
            raise RuntimeUnavailable("Docker is not available. Install Docker or start the daemon.")
        return [self._apply_one(identifier) for identifier in ordered_selection(selection)]

    def _apply_one(self, identifier: str) -> ServiceOutcome:
        try:
            definition = get_definition(identifier)
        except UnknownService as exc:
            return ServiceOutcome(identifier=identifier, status=OutcomeStatus.FAILED, message=str(exc))

        name = definition.identifier.value
        try:
            state = self._runtime.state(definition.container_name)
        except ExternalCommandFailure as exc:
            return ServiceOutcome(
                identifier=name,
                status=OutcomeStatus.FAILED,
                exit_code=exc.exit_code,
                output=exc.output,
                message=str(exc),
            )
        if state is ServiceState.RUNNING:
            log.info("%s is already running", name)
            return ServiceOutcome(identifier=name, status=OutcomeStatus.ALREADY_RUNNING)

        try:
            manifest = self._resolver.resolve(definition.identifier)
        except GenerationFailure as exc:
            log.error("generation failed for %s: %s", name, exc)
            return ServiceOutcome(identifier=name, status=OutcomeStatus.FAILED, message=str(exc))

        log.info("starting %s from %s", name, manifest.path)
        result = self._runtime.compose_up(manifest.path, name)
        if result.ok:
            return ServiceOutcome(identifier=name, status=OutcomeStatus.STARTED, exit_code=0, output=result.output)
        log.error("bring-up of %s failed with exit code %s", name, result.exit_code)
        return ServiceOutcome(
            identifier=name,
            status=OutcomeStatus.FAILED,
            exit_code=result.exit_code,
            output=result.output,
            message=f"docker compose up exited with {result.exit_code}",
        )
