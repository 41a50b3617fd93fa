from typing import Iterable, Optional
from ..domain.errors import (
    AuthenticationRequiredError,
    HomepageInsteadOfArchiveError,
    HtmlInsteadOfArchiveError,
    RetryableDownloadError,
)
from ..domain.interfaces import IResponseClassifier

AUTH_MARKERS = ("redirect", "login", "401", "403", "Unauthorized")
HOMEPAGE_MARKERS = ("<html", "<title>", "Home")


class HtmlResponseClassifier(IResponseClassifier):
    """
    Content-type, length and keyword heuristics for "you are not logged in" pages.
    """

    def __init__(
        self,
        min_length: int = 1000,
        auth_markers: Iterable[str] = AUTH_MARKERS,
        homepage_markers: Iterable[str] = HOMEPAGE_MARKERS,
    ):
        self._min_length = min_length
        self._auth_markers = tuple(auth_markers)
        self._homepage_markers = tuple(homepage_markers)

    def is_suspect(self, content_type: str, content_length: Optional[str]) -> bool:
        if "text/html" not in (content_type or ""):
            return False
        try:
            return content_length is not None and int(content_length) > self._min_length
        except ValueError:
            return False

    def classify(self, body: str, status: int) -> RetryableDownloadError:
        if any(marker in body for marker in self._auth_markers):
            return AuthenticationRequiredError(
                "Authentication required or access denied. Received HTML page instead of ZIP file. "
                "Please ensure you're logged into the web application."
            )
        if all(marker in body for marker in self._homepage_markers):
            return HomepageInsteadOfArchiveError(
                "Failed to download ZIP: Server returned homepage instead of livery archive. "
                "This typically means you need to be logged into the web application."
            )
        return HtmlInsteadOfArchiveError(
            f"Failed to download ZIP: Received HTML content instead of ZIP file. Status: {status}"
        )
