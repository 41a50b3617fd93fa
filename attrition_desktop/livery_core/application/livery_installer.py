import asyncio
import re
import tempfile
import zipfile
import aiofiles
import aiohttp
import structlog
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Tuple
from ..config import InstallerConfig
from ..domain.errors import (
    ArchiveNotFoundError,
    AuthenticationRequiredError,
    DirectorySelectionCanceled,
    DownloadError,
    DownloadInProgressError,
    ExtractionError,
    HttpStatusError,
    InvalidRequestError,
    RetryableDownloadError,
)
from ..domain.interfaces import ICookieSource, IResponseClassifier
from ..domain.models import InstallResult
from .directory_resolver import DirectoryResolver
from .response_classifier import HtmlResponseClassifier

logger = structlog.get_logger()

Sleep = Callable[[float], Awaitable[None]]

RETRYABLE_ERRORS = (RetryableDownloadError, aiohttp.ClientError, asyncio.TimeoutError)


class LiveryInstaller:
    """
    Downloads an event's livery archive and extracts it into the Customs folder.

    One call is one job: the archive is staged in the temp directory, extracted
    and removed again on every exit path. Jobs for different events may run
    side by side, a second job for an event that is still running is refused.
    """

    def __init__(
        self,
        resolver: DirectoryResolver,
        cookies: ICookieSource,
        config: Optional[InstallerConfig] = None,
        classifier: Optional[IResponseClassifier] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._resolver = resolver
        self._cookies = cookies
        self._config = config or InstallerConfig()
        self._classifier = classifier or HtmlResponseClassifier(self._config.HTML_SNIFF_MIN_BYTES)
        self._sleep = sleep
        self._active: Set[str] = set()

    @staticmethod
    def download_url(base_url: str, event_id: str) -> str:
        return f"{base_url}/events/{event_id}/liveries"

    def archive_path(self, event_id: str) -> Path:
        temp_dir = Path(self._config.TEMP_DIR or tempfile.gettempdir())
        safe_id = re.sub(r"[^A-Za-z0-9._-]", "_", event_id)
        return temp_dir / f"liveries_event_{safe_id}.zip"

    def is_active(self, event_id: str) -> bool:
        return str(event_id) in self._active

    async def download_and_install(self, event_id: Any, base_url: Any) -> InstallResult:
        """
        Never raises: every failure ends up in the result's message.
        """
        try:
            event_id, base_url = self._validate(event_id, base_url)
            if event_id in self._active:
                raise DownloadInProgressError(f"A download for event {event_id} is already in progress")
        except (InvalidRequestError, DownloadInProgressError) as e:
            logger.warning("livery_request_rejected", event_id=event_id, error=str(e))
            return InstallResult(success=False, message=str(e))

        self._active.add(event_id)
        logger.info("livery_install_started", event_id=event_id, base_url=base_url)
        try:
            target = await self._install(event_id, base_url)
        except Exception as e:
            logger.error("livery_install_failed", event_id=event_id, error=str(e))
            return InstallResult(success=False, message=str(e) or type(e).__name__)
        finally:
            self._active.discard(event_id)

        logger.info("livery_install_finished", event_id=event_id, target=str(target))
        return InstallResult(
            success=True,
            message=f"Liveries downloaded and extracted to {target}",
            target_directory=str(target),
        )

    def _validate(self, event_id: Any, base_url: Any) -> Tuple[str, str]:
        event_id = "" if event_id is None else str(event_id).strip()
        base_url = "" if base_url is None else str(base_url).strip()
        if not event_id or not base_url:
            raise InvalidRequestError("Missing required parameters: eventId and baseUrl")
        return event_id, base_url.rstrip("/")

    async def _install(self, event_id: str, base_url: str) -> Path:
        selection = await self._resolver.resolve_target_directory()
        if selection.canceled or not selection.path:
            raise DirectorySelectionCanceled("No directory selected for liveries extraction")

        target = Path(selection.path)
        target.mkdir(parents=True, exist_ok=True)

        url = self.download_url(base_url, event_id)
        archive = self.archive_path(event_id)
        headers = self._build_headers(url)
        logger.info("livery_download_prepared", url=url, archive=str(archive), target=str(target))

        try:
            await self._download_with_retry(url, archive, headers)
            await self._extract(archive, target)
        finally:
            self._cleanup(archive)
        return target

    def _build_headers(self, url: str) -> Dict[str, str]:
        headers = {
            "User-Agent": self._config.global_settings.user_agent,
            "Accept": "*/*",
        }
        try:
            cookie_header = self._cookies.cookie_header(url)
        except Exception as e:
            logger.warning("session_cookies_unavailable", error=str(e))
            cookie_header = None

        if cookie_header:
            headers["Cookie"] = cookie_header
            logger.info("session_cookies_attached", cookie=cookie_header)
        else:
            logger.warning("session_cookies_missing", hint="download may fail unless logged in through the web interface")
        return headers

    async def _download_with_retry(self, url: str, archive: Path, headers: Dict[str, str]) -> None:
        settings = self._config.download
        attempts = settings.max_attempts
        timeout = aiohttp.ClientTimeout(total=settings.timeout_sec)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            for attempt in range(1, attempts + 1):
                try:
                    logger.info("download_attempt", attempt=attempt, url=url)
                    await self._fetch_once(session, url, headers, archive)
                    logger.info("download_complete", archive=str(archive), size=archive.stat().st_size)
                    return
                except RETRYABLE_ERRORS as e:
                    message = str(e) or type(e).__name__
                    logger.warning("download_attempt_failed", attempt=attempt, error=message)
                    if attempt == attempts:
                        raise DownloadError(f"Failed to download after {attempts} attempts: {message}") from e

                    delay = settings.backoff_base_sec * 2 ** (attempt - 1)
                    logger.info("download_retry_scheduled", delay_sec=delay)
                    await self._sleep(delay)

    async def _fetch_once(self, session: aiohttp.ClientSession, url: str, headers: Dict[str, str], archive: Path) -> None:
        async with session.get(url, headers=headers) as response:
            if not 200 <= response.status < 300:
                raise self._status_error(response.status, response.reason or "")

            content_type = response.headers.get("Content-Type", "")
            content_length = response.headers.get("Content-Length")
            if self._classifier.is_suspect(content_type, content_length):
                logger.warning("html_instead_of_archive", content_type=content_type, length=content_length)
                body = await response.text(errors="replace")
                raise self._classifier.classify(body, response.status)

            # Pull the next chunk only once the previous one is on disk
            async with aiofiles.open(archive, "wb") as f:
                async for chunk in response.content.iter_chunked(self._config.download.chunk_size):
                    await f.write(chunk)

    @staticmethod
    def _status_error(status: int, reason: str) -> RetryableDownloadError:
        if status in (401, 403):
            return AuthenticationRequiredError(
                f"Authentication required: {status} {reason}. Please ensure you're logged into the web application."
            )
        if status == 404:
            return ArchiveNotFoundError(f"File not found: {status} {reason}")
        return HttpStatusError(f"Failed to download: {status} {reason}")

    async def _extract(self, archive: Path, target: Path) -> None:
        try:
            await asyncio.to_thread(self._extract_sync, archive, target)
        except Exception as e:
            raise ExtractionError(f"Failed to extract ZIP file: {e}") from e
        logger.info("archive_extracted", target=str(target))

    @staticmethod
    def _extract_sync(archive: Path, target: Path) -> None:
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(target)

    @staticmethod
    def _cleanup(archive: Path) -> None:
        try:
            archive.unlink()
            logger.info("temp_archive_removed", archive=str(archive))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("temp_archive_cleanup_failed", archive=str(archive), error=str(e))
