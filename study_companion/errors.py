"""Error taxonomy shared by the client, the AI layer and document extraction."""


class StudyCompanionError(Exception):
    """Base class; ``message`` is always safe to show to a user."""

    def __init__(self, message=''):
        super().__init__(message)
        self.message = str(message or '')


class RemoteUnavailable(StudyCompanionError):
    """The remote collaborator could not be reached or raised."""


class RemoteRejected(StudyCompanionError):
    """The remote service answered with a non-2xx status."""

    def __init__(self, status, message=''):
        super().__init__(message or f'Request failed: {status}')
        self.status = int(status)


class MalformedResponse(StudyCompanionError):
    """A response arrived but its shape was not what the caller needs."""


class UnsupportedInput(StudyCompanionError):
    """The input kind is not one the system knows how to handle."""


class DocumentExtractionError(StudyCompanionError):
    """A recognised document could not be read."""
