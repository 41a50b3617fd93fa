import threading
import aiohttp
import structlog
from dataclasses import dataclass
from http.cookies import CookieError, Morsel
from typing import Dict, Iterable, Optional, Tuple
from yarl import URL

logger = structlog.get_logger()


@dataclass(frozen=True)
class SessionCookie:
    """
    One browser cookie as the embedded browser reports it.

    Chromium keeps the Set-Cookie convention: a domain cookie carries a leading
    dot (".blancpaw-gt.uk"), a host-only cookie carries the bare host.
    """
    name: str
    value: str
    domain: str = ""
    path: str = "/"
    secure: bool = False

    @property
    def host(self) -> str:
        return self.domain.lstrip(".").lower()

    @property
    def host_only(self) -> bool:
        return not self.domain.startswith(".")

    def to_morsel(self) -> Morsel:
        morsel = Morsel()
        morsel.set(self.name, self.value, self.value)
        if not self.host_only:
            morsel["domain"] = self.host
        morsel["path"] = self.path or "/"
        if self.secure:
            morsel["secure"] = True
        return morsel

    def origin(self) -> URL:
        """URL the cookie is filed under, host-only cookies are bound to exactly this host."""
        return URL.build(scheme="https" if self.secure else "http", host=self.host, path="/")


class SessionCookieJar:
    """
    Thread-safe snapshot of the embedded browser's cookie store.

    The Qt side feeds it from QWebEngineCookieStore signals on the GUI thread.
    Scoping (domain, host-only, path, secure) is left to ``aiohttp.CookieJar``,
    so ``header_for`` must be called from a running event loop.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cookies: Dict[Tuple[str, str, str], SessionCookie] = {}

    def add(self, cookie: SessionCookie) -> None:
        if not cookie.name:
            return
        with self._lock:
            self._cookies[(cookie.name, cookie.domain, cookie.path)] = cookie

    def remove(self, cookie: SessionCookie) -> None:
        with self._lock:
            self._cookies.pop((cookie.name, cookie.domain, cookie.path), None)

    def merge(self, cookies: Iterable[SessionCookie]) -> None:
        for cookie in cookies:
            self.add(cookie)

    def clear(self) -> None:
        with self._lock:
            self._cookies.clear()

    def count(self) -> int:
        with self._lock:
            return len(self._cookies)

    def build_jar(self) -> aiohttp.CookieJar:
        """
        Loads the snapshot into a fresh aiohttp jar.
        Cookies without a domain have no scope and are never loaded.
        """
        with self._lock:
            snapshot = list(self._cookies.values())

        # unsafe: a platform served from an IP address still gets its cookies
        jar = aiohttp.CookieJar(unsafe=True)
        for cookie in snapshot:
            if not cookie.host:
                logger.warning("cookie_without_domain_skipped", name=cookie.name)
                continue
            try:
                jar.update_cookies({cookie.name: cookie.to_morsel()}, response_url=cookie.origin())
            except (CookieError, ValueError) as e:
                logger.warning("cookie_rejected", name=cookie.name, domain=cookie.domain, error=str(e))
        return jar

    def header_for(self, url: str) -> Optional[str]:
        filtered = self.build_jar().filter_cookies(URL(url))
        if not filtered:
            return None
        return "; ".join(f"{morsel.key}={morsel.coded_value}" for morsel in filtered.values())
