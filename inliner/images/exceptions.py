class InlinerError(Exception):
    """Base class for every error raised by inliner.images."""


class ConfigurationError(InlinerError):
    pass


class InvalidRequestError(InlinerError, ValueError):
    """Input rejected before any network call."""


class APIError(InlinerError):
    """A one-shot call to the Inliner API failed."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UploadError(APIError):
    pass


class GenerationError(InlinerError):
    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class GenerationFailedError(GenerationError):
    """The remote job reported a terminal failure."""


class GenerationTimeoutError(GenerationError):
    """The job did not complete within the polling budget."""

    def __init__(self, path: str, elapsed: float):
        super().__init__(
            f"Image generation timeout after {elapsed:g} seconds. Path: {path}",
            path,
        )
        self.elapsed = elapsed


class GenerationCancelledError(GenerationError):
    def __init__(self, path: str, attempts: int):
        super().__init__(
            f"Image generation cancelled after {attempts} attempt(s). Path: {path}",
            path,
        )
        self.attempts = attempts
