import asyncio
import aiohttp
import structlog
from typing import Optional
from attrition_desktop.config import APP_VERSION, UpdateSettings, get_settings
from ..domain.models import UpdateInfo

logger = structlog.get_logger()


def compare_versions(first: Optional[str], second: Optional[str]) -> int:
    """
    Compares dotted version strings.
    Returns 1 if first is newer, -1 if second is newer, 0 if equal.
    A leading 'v' and build/pre-release suffixes are ignored, missing parts count as 0.
    """
    def parts(version: Optional[str]) -> list:
        core = (version or "").strip().lstrip("vV").split("+")[0].split("-")[0]
        numbers = []
        for piece in core.split("."):
            try:
                numbers.append(int(piece))
            except ValueError:
                numbers.append(0)
        return numbers

    left, right = parts(first), parts(second)
    for i in range(max(len(left), len(right))):
        a = left[i] if i < len(left) else 0
        b = right[i] if i < len(right) else 0
        if a > b:
            return 1
        if a < b:
            return -1
    return 0


class UpdateChecker:
    """
    Looks up the newest stable GitHub release.
    """

    def __init__(self, settings: Optional[UpdateSettings] = None, current_version: str = APP_VERSION):
        self._settings = settings or get_settings().update
        self._current_version = current_version

    async def check(self) -> UpdateInfo:
        """
        Never raises: failures are reported in UpdateInfo.error.
        """
        logger.info("update_check_started", url=self._settings.releases_url)
        try:
            releases = await self._fetch_releases()
            latest = next((r for r in releases if not r.get("prerelease")), None)
            if not latest:
                raise ValueError("No stable releases found")

            latest_version = str(latest.get("tag_name", "")).lstrip("v")
            available = compare_versions(latest_version, self._current_version) > 0
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, TypeError, AttributeError) as e:
            logger.warning("update_check_failed", error=str(e))
            return UpdateInfo(current_version=self._current_version, error=str(e) or type(e).__name__)

        logger.info(
            "update_check_finished",
            current=self._current_version,
            latest=latest_version,
            update_available=available,
        )
        return UpdateInfo(
            current_version=self._current_version,
            latest_version=latest_version,
            is_update_available=available,
            release_url=latest.get("html_url"),
        )

    async def _fetch_releases(self) -> list:
        timeout = aiohttp.ClientTimeout(total=self._settings.timeout_sec)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self._settings.releases_url, headers={"Accept": "application/vnd.github+json"}) as resp:
                if resp.status != 200:
                    raise ValueError(f"HTTP error! status: {resp.status}")
                releases = await resp.json(content_type=None)
        if not isinstance(releases, list) or not releases:
            raise ValueError("No releases found")
        return releases
