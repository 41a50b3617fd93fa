"""Exceptions raised inside the livery core.

They never cross the IPC boundary: the installer and the bridge turn them into
``{"success": False, "message": ...}`` results.
"""


class AttritionDesktopError(Exception):
    """Base exception for all Attrition Desktop errors."""


class InvalidRequestError(AttritionDesktopError):
    """Missing or malformed request parameters."""


class DirectorySelectionCanceled(AttritionDesktopError):
    """The user backed out of choosing a livery folder."""


class DownloadInProgressError(AttritionDesktopError):
    """A download for the same event is already running."""


class DownloadError(AttritionDesktopError):
    """The archive could not be downloaded."""


class RetryableDownloadError(DownloadError):
    """Download failure worth another attempt."""


class AuthenticationRequiredError(RetryableDownloadError):
    """Server refused the request or served a login page."""


class ArchiveNotFoundError(RetryableDownloadError):
    """Server answered 404."""


class HttpStatusError(RetryableDownloadError):
    """Any other non-2xx answer."""


class HomepageInsteadOfArchiveError(RetryableDownloadError):
    """Server redirected to its homepage."""


class HtmlInsteadOfArchiveError(RetryableDownloadError):
    """Server answered with some HTML page instead of a ZIP."""


class ExtractionError(AttritionDesktopError):
    """The downloaded archive could not be extracted."""
