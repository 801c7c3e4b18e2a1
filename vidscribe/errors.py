class VidscribeError(Exception):
    """Base class for all errors raised by vidscribe."""


class StartupConfigError(VidscribeError):
    """Required configuration (e.g. GEMINI_API_KEY) is missing or invalid."""


class UploadError(VidscribeError):
    """The local video could not be uploaded to the Gemini Files API."""


class ProcessingFailedError(VidscribeError):
    """The remote file did not reach the ACTIVE state."""

    def __init__(self, message: str, file=None):
        super().__init__(message)
        self.file = file


class ProcessingTimeoutError(ProcessingFailedError):
    """The remote file was still PROCESSING when the poll bound ran out."""


class OperationCancelledError(VidscribeError):
    pass


class GenerationError(VidscribeError):
    """Token counting or content generation failed."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause
