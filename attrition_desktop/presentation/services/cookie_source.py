from typing import TYPE_CHECKING, Callable, Optional
from PySide6.QtNetwork import QNetworkCookie

from attrition_desktop.livery_core.domain.interfaces import ICookieSource
from attrition_desktop.livery_core.infrastructure.cookie_jar import SessionCookie, SessionCookieJar

if TYPE_CHECKING:
    from PySide6.QtWebEngineCore import QWebEngineCookieStore


def to_session_cookie(cookie: QNetworkCookie) -> SessionCookie:
    # Domain kept verbatim, its leading dot is what marks a domain cookie
    return SessionCookie(
        name=bytes(cookie.name()).decode("utf-8", errors="ignore"),
        value=bytes(cookie.value()).decode("utf-8", errors="ignore"),
        domain=cookie.domain() or "",
        path=cookie.path() or "/",
        secure=cookie.isSecure(),
    )


def bind_cookie_store(store: "QWebEngineCookieStore", jar: SessionCookieJar) -> None:
    """
    Mirrors the browser profile's cookies into the jar, including ones persisted from earlier runs.
    """
    store.cookieAdded.connect(lambda cookie: jar.add(to_session_cookie(cookie)))
    store.cookieRemoved.connect(lambda cookie: jar.remove(to_session_cookie(cookie)))
    store.loadAllCookies()


class MainViewCookieSource(ICookieSource):
    """
    Session cookies are only offered while the main view (and its login) exists.
    """

    def __init__(self, jar: SessionCookieJar, has_main_view: Callable[[], bool]):
        self._jar = jar
        self._has_main_view = has_main_view

    def cookie_header(self, url: str) -> Optional[str]:
        if not self._has_main_view():
            return None
        return self._jar.header_for(url)
