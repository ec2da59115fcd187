# velocity_broadcast/core/updates.py
"""Checks the plugin's resource page for a newer release.

The endpoint answers a plain GET with a ``text/plain`` body holding only the
latest version string. Any failure (transport error, timeout, non-2xx status,
empty body) is reported as an unknown version that counts as current, so
callers simply have nothing to announce.

Checks can run synchronously, or on a single-worker pool owned by the
`UpdateChecker`. The pool is joined by `shutdown`, which the plugin calls when
it unloads.
"""
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from velocity_broadcast.config.const import (
    DOWNLOAD_URL,
    PERMISSION_UPDATE,
    PLUGIN_VERSION,
    UPDATE_CHECK_CACHE_SECONDS,
    UPDATE_CHECK_TIMEOUT,
    UPDATE_CHECK_URL,
    UPDATE_CHECK_USER_AGENT,
    app_name_title,
)
from velocity_broadcast.config.settings import Settings
from velocity_broadcast.error import NetworkError
from velocity_broadcast.formatting import colorize
from velocity_broadcast.proxy import CommandSource

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"


@dataclass(frozen=True)
class VersionCheckResult:
    """The outcome of one version check."""

    latest_version: str
    is_current: bool

    @property
    def is_known(self) -> bool:
        return self.latest_version != UNKNOWN_VERSION

    @classmethod
    def unknown(cls) -> "VersionCheckResult":
        return cls(latest_version=UNKNOWN_VERSION, is_current=True)


class UpdateChecker:
    """Fetches the latest published version and tells privileged sessions about it."""

    def __init__(
        self,
        settings: Settings,
        current_version: str = PLUGIN_VERSION,
        url: str = UPDATE_CHECK_URL,
        timeout: float = UPDATE_CHECK_TIMEOUT,
        session: Optional[requests.Session] = None,
        cache_seconds: float = UPDATE_CHECK_CACHE_SECONDS,
    ):
        """Initializes the checker.

        Args:
            settings: The plugin settings, consulted for the update-check flag.
            current_version: The running plugin version.
            url: The version endpoint.
            timeout: Connect and read timeout in seconds.
            session: An optional `requests.Session`; module-level
                `requests.get` is used when omitted.
            cache_seconds: How long the last result is reused by session
                checks before a new request is made.
        """
        self.settings = settings
        self.current_version = current_version
        self.url = url
        self.timeout = timeout
        self._session = session
        self.cache_seconds = cache_seconds
        self._result_lock = threading.Lock()
        self._last_result: Optional[VersionCheckResult] = None
        self._last_checked = 0.0
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()
        self._closed = False

    # --- Synchronous checks ---

    def fetch_latest_version(self) -> VersionCheckResult:
        """Performs one request to the version endpoint and caches the result.

        Never raises. Failures are logged and produce
        `VersionCheckResult.unknown()`.
        """
        try:
            latest_version = self._request_latest_version()
        except NetworkError as e:
            logger.warning(f"Failed to check for updates: {e}")
            result = VersionCheckResult.unknown()
        else:
            logger.debug(
                f"Version endpoint reports '{latest_version}', running '{self.current_version}'."
            )
            result = VersionCheckResult(
                latest_version=latest_version,
                is_current=latest_version == self.current_version,
            )

        with self._result_lock:
            self._last_result = result
            self._last_checked = time.monotonic()
        return result

    def cached_result(self) -> Optional[VersionCheckResult]:
        """The last fetched result, or ``None`` if there is none or it has expired."""
        with self._result_lock:
            if self._last_result is None:
                return None
            if time.monotonic() - self._last_checked >= self.cache_seconds:
                return None
            return self._last_result

    def latest_result(self) -> VersionCheckResult:
        """The cached result while it is fresh, otherwise a new fetch."""
        cached = self.cached_result()
        if cached is not None:
            return cached
        return self.fetch_latest_version()

    def _request_latest_version(self) -> str:
        """Fetches and parses the endpoint body.

        Raises:
            NetworkError: On transport errors, non-2xx responses or an empty body.
        """
        http_get = self._session.get if self._session is not None else requests.get
        try:
            response = http_get(
                self.url,
                headers={"User-Agent": UPDATE_CHECK_USER_AGENT},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise NetworkError(self.url, f"Request failed ({e})") from e

        if not 200 <= response.status_code < 300:
            raise NetworkError(
                self.url, f"Unexpected HTTP status {response.status_code}"
            )

        lines = (response.text or "").strip().splitlines()
        if not lines:
            raise NetworkError(self.url, "Empty response body")
        return lines[0].strip()

    def format_notice(self, result: VersionCheckResult) -> str:
        return (
            f"&6[&e{app_name_title}&6] &eA new version of {app_name_title} is available: "
            f"&f{result.latest_version}&e (running &f{self.current_version}&e). "
            f"Download at {DOWNLOAD_URL}"
        )

    def notify_if_stale(
        self,
        result: VersionCheckResult,
        recipient: CommandSource,
        required_permission: str = PERMISSION_UPDATE,
    ) -> bool:
        """Sends `recipient` a one-line notice if `result` is stale.

        Does nothing when the installed version is current or the recipient
        lacks `required_permission`. Never raises.

        Returns:
            ``True`` if a notice was delivered.
        """
        try:
            if result.is_current:
                return False
            if not recipient.has_permission(required_permission):
                return False
            recipient.send_message(colorize(self.format_notice(result)))
            return True
        except Exception as e:
            logger.error(
                f"Could not deliver update notice to '{getattr(recipient, 'name', recipient)}': {e}",
                exc_info=True,
            )
            return False

    def log_result(self, result: VersionCheckResult):
        if not result.is_known:
            logger.info("Latest version could not be determined; skipping update notice.")
        elif result.is_current:
            logger.info(f"You are using the latest version of {app_name_title}.")
        else:
            logger.warning(
                f"A new version of {app_name_title} is available: {result.latest_version}. "
                f"Download at {DOWNLOAD_URL}."
            )

    def check_and_log(self) -> Optional[VersionCheckResult]:
        """Runs the startup check if it is enabled in the settings."""
        if not self.settings.is_update_check_enabled():
            logger.info("Update check is disabled in the settings. Skipping.")
            return None
        result = self.fetch_latest_version()
        self.log_result(result)
        return result

    def check_and_notify(self, recipient: CommandSource) -> Optional[VersionCheckResult]:
        """Notifies `recipient` if stale, reusing a recent result when there is one."""
        if not self.settings.is_update_check_enabled():
            return None
        result = self.latest_result()
        self.notify_if_stale(result, recipient)
        return result

    # --- Background checks ---

    def submit(self, func: Callable[..., Any], *args: Any) -> Optional[Future]:
        """Runs `func(*args)` on the checker's worker pool.

        Returns:
            The `Future` of the task, or ``None`` after `shutdown`.
        """
        with self._executor_lock:
            if self._closed:
                logger.warning("Update checker is shut down; background check not started.")
                return None
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="vbroadcast-update"
                )
            return self._executor.submit(self._run_guarded, func, *args)

    @staticmethod
    def _run_guarded(func: Callable[..., Any], *args: Any) -> Any:
        try:
            return func(*args)
        except Exception as e:
            logger.error(f"Background update check failed: {e}", exc_info=True)
            return None

    def submit_startup_check(self) -> Optional[Future]:
        return self.submit(self.check_and_log)

    def submit_session_check(self, player: CommandSource) -> Optional[Future]:
        """Handles the update notice for a new session.

        Sessions without the update permission are ignored. While a recent
        result is cached the notice is sent right away and ``None`` is
        returned; otherwise a background check is scheduled and its `Future`
        returned. Checks queued behind one another share a single request.
        """
        if not self.settings.is_update_check_enabled():
            return None
        if not player.has_permission(PERMISSION_UPDATE):
            return None
        cached = self.cached_result()
        if cached is not None:
            self.notify_if_stale(cached, player)
            return None
        return self.submit(self.check_and_notify, player)

    def shutdown(self, wait: bool = True):
        """Stops accepting checks and joins the worker pool.

        Queued checks that have not started are cancelled; a request already
        in flight finishes within its timeout.
        """
        with self._executor_lock:
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            logger.debug("Shutting down update check worker.")
            executor.shutdown(wait=wait, cancel_futures=True)
