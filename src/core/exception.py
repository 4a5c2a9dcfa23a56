class BaseAppError(Exception):
    def __init__(self, message: str = "An error occured"):
        self.message = message
        super().__init__(self.message)


class ValidationError(BaseAppError):
    pass


class ExternalServiceError(BaseAppError):
    """The external classifier timed out, was unreachable or answered garbage."""


class InternalPipelineError(BaseAppError):
    """Unexpected failure inside the moderation aggregator."""


class StorageError(BaseAppError):
    def __init__(self, message: str = "Storage is temporarily unavailable. Please try again."):
        super().__init__(message)


class DuplicateReportError(BaseAppError):
    def __init__(self, message: str = "You have already reported this content."):
        super().__init__(message)
