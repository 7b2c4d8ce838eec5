from typing import Optional


class UpstreamError(Exception):
    """Raised by the transport layer when an upstream call cannot be completed.

    ``message`` is the fixed, human-readable text shown in the dashboard banner;
    the technical cause stays in the log and in ``__cause__``.
    """

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.url = url
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message
