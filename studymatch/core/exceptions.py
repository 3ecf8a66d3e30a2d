class StudyMatchError(Exception):
    """Base class for errors surfaced to callers of the matching core."""


class InvalidInputError(StudyMatchError):
    """Rejected input: unknown ids, retaken questions, empty submissions."""


class NotFoundError(StudyMatchError):
    """A directly looked-up entity does not exist."""
