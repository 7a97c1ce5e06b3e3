from __future__ import annotations


class PidockError(Exception):
    """Base installer error."""


class UnknownService(PidockError):
    def __init__(self, identifier: str):
        super().__init__(f"Unknown service: {identifier}")
        self.identifier = identifier


class NotFound(PidockError):
    def __init__(self, name: str):
        super().__init__(f"Container not found: {name}")
        self.name = name


class RuntimeUnavailable(PidockError):
    """Docker is not installed or the daemon is not reachable."""


class GenerationFailure(PidockError):
    """Secret, certificate or manifest generation failed."""


class AmbiguousSelection(PidockError):
    """A single-target operation received several targets."""


class ExternalCommandFailure(PidockError):
    def __init__(self, exit_code: int, output: str, message: str | None = None):
        super().__init__(message or f"command failed with exit code {exit_code}")
        self.exit_code = exit_code
        self.output = output
