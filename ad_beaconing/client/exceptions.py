"""Custom exceptions for session resolution."""


class ResolutionFailure(Exception):
    """Raised when neither the POST init nor the GET request resolved a session.

    The previous session stays in place; callers retry by setting the media URL
    again.
    """

    def __init__(
        self,
        message: str = "Failed to resolve session",
        *,
        media_url: str = "",
        error: BaseException | None = None,
    ):
        self.message = message
        self.media_url = media_url
        self.error = error
        super().__init__(self.message)
