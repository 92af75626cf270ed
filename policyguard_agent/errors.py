from __future__ import annotations


class ScanError(Exception):
    """An error that ends a scan and is reported to the caller as ``{error, message}``."""

    status_code = 500
    error = "Scan failed"

    def __init__(self, message: str, *, error: str | None = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "message": self.message}


class InvalidTargetError(ScanError):
    status_code = 400
    error = "Invalid URL"


class HomepageUnavailableError(ScanError):
    status_code = 500
    error = "Failed to fetch homepage"
