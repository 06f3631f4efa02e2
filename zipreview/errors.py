"""Domain exception hierarchy for the review service.

Services raise these so that the global exception handler in
``zipreview.middleware.exception_handler`` can map them to the correct
HTTP status code without string matching.

Expected outcomes (no descriptor, unparsable descriptor, unreadable sample
file) are *not* modelled here: they are returned as ``None`` / empty values
by the services and only turned into a ``UserInputError`` at the pipeline
boundary when the request cannot continue.
"""


class ReviewError(Exception):
    """Base for all domain exceptions."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        status_code: int = 500,
        details: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class UserInputError(ReviewError):
    """The upload itself is unusable (400)."""

    def __init__(self, message: str = "Bad request"):
        super().__init__(message, status_code=400)


class MissingUploadError(UserInputError):
    """The multipart request carried no archive."""

    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message)


class DescriptorNotFoundError(UserInputError):
    """The extracted archive contains no project descriptor."""

    def __init__(self, filename: str = "package.json"):
        super().__init__(f"No {filename} found")
        self.filename = filename


class UploadTooLargeError(ReviewError):
    """The uploaded archive exceeds ``MAX_UPLOAD_BYTES`` (413)."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            "Uploaded archive is too large",
            status_code=413,
            details=f"{size} bytes, max {limit}",
        )


class ServiceUnavailableError(ReviewError):
    """A required collaborator is not configured (503)."""

    def __init__(self, message: str = "Service unavailable"):
        super().__init__(message, status_code=503)


class PipelineError(ReviewError):
    """Structural failure that aborts the request (500).

    ``details`` is meant for operators and is returned alongside the
    generic message.
    """

    def __init__(
        self,
        message: str = "Something went wrong during analysis",
        *,
        details: str | None = None,
    ):
        super().__init__(message, status_code=500, details=details)


class ArchiveExtractionError(PipelineError):
    """The uploaded archive is corrupt or unsafe to extract."""

    def __init__(self, details: str):
        super().__init__("Failed to extract archive", details=details)


class FilesystemError(PipelineError):
    """A directory needed by the pipeline could not be enumerated."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            "Failed to read extracted project",
            details=f"{path}: {reason}",
        )
        self.path = path


def format_error_response(
    *,
    error: str,
    details: object = None,
    request_id: str = "",
) -> dict:
    """Build a structured error response dict.

    Parameters
    ----------
    error : str
        Short error message (e.g. ``"No package.json found"``).
    details : object
        Optional diagnostic detail string or validation error list.
        Omitted from the body when ``None``.
    request_id : str
        The request ID for tracing.

    Returns
    -------
    dict
        ``{"error": ..., "details": ..., "request_id": ...}``
    """
    body: dict = {"error": error}
    if details is not None:
        body["details"] = details
    body["request_id"] = request_id
    return body
