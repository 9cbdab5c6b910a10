class TimelineError(Exception):
    """Base class for recoverable timeline engine failures."""


class ProbeFailure(TimelineError):
    """The metadata probe could not produce a usable duration."""


class InvalidReference(TimelineError, LookupError):
    """A clip id that is no longer (or never was) part of the sequence."""

    def __init__(self, clip_id):
        super().__init__(f"Unknown clip id: {clip_id!r}")
        self.clip_id = clip_id
