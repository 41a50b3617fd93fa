from pathlib import Path
from typing import Optional, Protocol


class IDirectoryPrompt(Protocol):
    """
    Interface for asking the user about folders.
    Implementations may hop to a GUI thread; callers only await.
    """
    async def pick_directory(self, title: str, message: str, start_dir: Path) -> Optional[str]:
        """Returns the chosen folder, or None when the dialog was canceled."""
        ...

    async def confirm(self, title: str, message: str) -> bool:
        """Yes/No question. Returns True when the user chose to continue."""
        ...


class ICookieSource(Protocol):
    """
    Interface for the embedded browser's session cookies.
    """
    def cookie_header(self, url: str) -> Optional[str]:
        """Returns a ``Cookie`` header value for the url, or None when there is nothing to send."""
        ...


class IResponseClassifier(Protocol):
    """
    Interface for spotting HTML pages served in place of the archive.
    """
    def is_suspect(self, content_type: str, content_length: Optional[str]) -> bool:
        """True when the body must be read and classified before trusting it."""
        ...

    def classify(self, body: str, status: int) -> Exception:
        """Returns the error describing what the HTML body most likely is."""
        ...
