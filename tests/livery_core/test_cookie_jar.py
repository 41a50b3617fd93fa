import threading
import pytest
from attrition_desktop.livery_core.infrastructure.cookie_jar import SessionCookie, SessionCookieJar

EVENT_URL = "https://blancpaw-gt.uk/events/1/liveries"


@pytest.fixture
def jar():
    return SessionCookieJar()


def header_parts(header):
    return set(header.split("; ")) if header else set()


@pytest.mark.asyncio
async def test_empty_jar_has_no_header(jar):
    assert jar.header_for(EVENT_URL) is None


@pytest.mark.asyncio
async def test_header_joins_matching_cookies(jar):
    jar.merge([
        SessionCookie("session", "abc", "blancpaw-gt.uk"),
        SessionCookie("theme", "dark", ".blancpaw-gt.uk"),
        SessionCookie("other", "x", "example.test"),
    ])
    assert header_parts(jar.header_for(EVENT_URL)) == {"session=abc", "theme=dark"}


@pytest.mark.asyncio
async def test_domain_cookies_reach_subdomains(jar):
    jar.add(SessionCookie("session", "abc", ".blancpaw-gt.uk"))
    assert jar.header_for("https://api.blancpaw-gt.uk/") == "session=abc"
    assert jar.header_for("https://notblancpaw-gt.uk/") is None


@pytest.mark.asyncio
async def test_host_only_cookies_stay_on_their_host(jar):
    jar.add(SessionCookie("sid", "secret", "blancpaw-gt.uk"))

    assert jar.header_for("https://blancpaw-gt.uk/") == "sid=secret"
    assert jar.header_for("https://evil.blancpaw-gt.uk/") is None


@pytest.mark.asyncio
async def test_cookies_without_domain_are_never_sent(jar):
    jar.add(SessionCookie("sid", "secret", ""))

    assert jar.header_for("https://attacker.example/") is None
    assert jar.header_for(EVENT_URL) is None


@pytest.mark.asyncio
async def test_secure_cookies_need_https(jar):
    jar.add(SessionCookie("session", "abc", "blancpaw-gt.uk", secure=True))
    assert jar.header_for("http://blancpaw-gt.uk/") is None
    assert jar.header_for("https://blancpaw-gt.uk/") == "session=abc"


@pytest.mark.asyncio
async def test_path_scoping(jar):
    jar.add(SessionCookie("root", "1", "blancpaw-gt.uk", "/"))
    jar.add(SessionCookie("events", "2", "blancpaw-gt.uk", "/events"))
    jar.add(SessionCookie("admin", "3", "blancpaw-gt.uk", "/admin"))

    assert header_parts(jar.header_for(EVENT_URL)) == {"events=2", "root=1"}
    assert jar.header_for("https://blancpaw-gt.uk/eventsx") == "root=1"


@pytest.mark.asyncio
async def test_ip_hosted_platform_gets_its_cookies(jar):
    jar.add(SessionCookie("session", "abc", "127.0.0.1"))
    assert jar.header_for("http://127.0.0.1:8080/events/1/liveries") == "session=abc"


@pytest.mark.asyncio
async def test_same_key_replaces_and_remove_deletes(jar):
    jar.add(SessionCookie("session", "old", "blancpaw-gt.uk"))
    jar.add(SessionCookie("session", "new", "blancpaw-gt.uk"))
    assert jar.count() == 1
    assert jar.header_for("https://blancpaw-gt.uk/") == "session=new"

    jar.remove(SessionCookie("session", "", "blancpaw-gt.uk"))
    assert jar.count() == 0


@pytest.mark.asyncio
async def test_malformed_cookie_names_are_skipped(jar):
    jar.add(SessionCookie("bad name", "x", "blancpaw-gt.uk"))
    jar.add(SessionCookie("session", "abc", "blancpaw-gt.uk"))

    assert jar.header_for("https://blancpaw-gt.uk/") == "session=abc"


@pytest.mark.asyncio
async def test_nameless_cookies_are_ignored(jar):
    jar.add(SessionCookie("", "value", "blancpaw-gt.uk"))
    assert jar.count() == 0


def test_host_only_follows_leading_dot():
    assert SessionCookie("a", "1", "blancpaw-gt.uk").host_only
    assert not SessionCookie("a", "1", ".blancpaw-gt.uk").host_only
    assert SessionCookie("a", "1", ".Blancpaw-GT.uk").host == "blancpaw-gt.uk"


def test_concurrent_writers(jar):
    def writer(prefix):
        for i in range(200):
            jar.add(SessionCookie(f"{prefix}{i}", "v", "blancpaw-gt.uk"))

    threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert jar.count() == 800
    jar.clear()
    assert jar.count() == 0
