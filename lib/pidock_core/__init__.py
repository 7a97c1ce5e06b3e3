from .catalog import CATALOG, ServiceDefinition, ServiceId, get_definition
from .config_types import HostFacts, InstallerConfig
from .errors import (
    AmbiguousSelection,
    ExternalCommandFailure,
    GenerationFailure,
    NotFound,
    PidockError,
    RuntimeUnavailable,
    UnknownService,
)
from .lifecycle import Action, LifecycleController
from .outcomes import OutcomeStatus, ServiceOutcome
from .reconciler import Reconciler
from .resolver import CatalogResolver, ManifestFile
from .runtime import ContainerRuntime, DockerCli, ServiceState

__all__ = [
    "CATALOG",
    "Action",
    "AmbiguousSelection",
    "CatalogResolver",
    "ContainerRuntime",
    "DockerCli",
    "ExternalCommandFailure",
    "GenerationFailure",
    "HostFacts",
    "InstallerConfig",
    "LifecycleController",
    "ManifestFile",
    "NotFound",
    "OutcomeStatus",
    "PidockError",
    "Reconciler",
    "RuntimeUnavailable",
    "ServiceDefinition",
    "ServiceId",
    "ServiceOutcome",
    "ServiceState",
    "UnknownService",
    "get_definition",
]
