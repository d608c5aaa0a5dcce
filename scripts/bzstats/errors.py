"""Failure types raised across the pipeline."""


class LoadError(Exception):
    """The raw document could not be fetched or was empty."""


class MalformedRecordError(ValueError):
    """A single game record could not be normalized.

    Carries a short machine-friendly ``reason`` so callers can tally skips.
    """

    def __init__(self, reason, detail=""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class MissingElementError(LookupError):
    """A rendering surface has no target for the requested chart."""
