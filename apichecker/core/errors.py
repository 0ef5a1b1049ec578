"""Exception taxonomy for the API checker."""


class ApiCheckerError(Exception):
    """Base class for every error raised by apichecker."""


class ProbeInputError(ApiCheckerError):
    """A required caller input is missing or unusable. No request is sent."""


class CorpusError(ApiCheckerError):
    """A payload corpus file could not be loaded."""


class UnknownProbeError(ApiCheckerError, KeyError):
    """The orchestrator was asked for a probe it does not know."""

    def __str__(self):
        return f"unknown probe: {self.args[0]!r}" if self.args else "unknown probe"


class TargetUnreachableError(ApiCheckerError):
    """Every request of a probe ended in a transport error."""
