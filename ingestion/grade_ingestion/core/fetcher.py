import logging
import threading
from typing import Dict, Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.exceptions import ConnectTimeoutError, MaxRetryError, ReadTimeoutError
from urllib3.util.retry import Retry

from app.config import settings
from ingestion.grade_ingestion.core.errors import (
    FetchError, FetchTimeout, FetchHttpError, FetchNetworkError, EmptyResponse
)
from ingestion.grade_ingestion.core.schemas import AvailabilityResult

if not settings.VERIFY_SSL:
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

logger = logging.getLogger(__name__)

# The portal serves degraded or empty pages to unrecognised clients.
DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'ru-RU,ru;q=0.9,en;q=0.5',
}

class FixedBackoffRetry(Retry):
    """urllib3 Retry that waits the same delay before every retry instead of growing it."""

    def __init__(self, *args, fixed_backoff: float = 0.0, **kwargs):
        super().__init__(*args, **kwargs)
        self.fixed_backoff = fixed_backoff

    def new(self, **kw):
        retry = super().new(**kw)
        retry.fixed_backoff = self.fixed_backoff
        return retry

    def get_backoff_time(self) -> float:
        return self.fixed_backoff if self.history else 0.0

class PageFetcher:
    """
    Retrieves raw HTML with a hard timeout.
    Retries run inside the transport (urllib3 Retry on the mounted HTTPAdapter);
    only the final outcome of a fetch is surfaced to the caller.
    """

    RETRY_STATUSES = [500, 502, 503, 504]

    def __init__(
        self,
        base_url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None,
        pool_size: int = 8
    ):
        self.base_url = base_url or settings.SOURCE_BASE_URL
        self.headers = headers or DEFAULT_HEADERS
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self.retries = max(1, retries if retries is not None else settings.FETCH_RETRIES)
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.FETCH_BACKOFF_SECONDS
        self.pool_size = pool_size

        # A caller-supplied session brings its own transport policy
        self._external_session = session
        self._sessions: Dict[int, requests.Session] = {}
        self._lock = threading.Lock()
        self.session = session if session is not None else self._session_for(self.retries)

    def retry_policy(self, attempts: int) -> FixedBackoffRetry:
        return FixedBackoffRetry(
            total=max(1, attempts) - 1,
            status_forcelist=self.RETRY_STATUSES,
            allowed_methods=["GET"],
            raise_on_status=False,
            fixed_backoff=self.backoff_seconds,
        )

    def _session_for(self, attempts: int) -> requests.Session:
        if self._external_session is not None:
            return self._external_session

        # --- Connection Pooling & Retries (one session per retry budget) ---
        with self._lock:
            session = self._sessions.get(attempts)
            if session is None:
                session = requests.Session()
                adapter = HTTPAdapter(
                    pool_connections=self.pool_size,
                    pool_maxsize=self.pool_size,
                    max_retries=self.retry_policy(attempts)
                )
                session.mount("https://", adapter)
                session.mount("http://", adapter)
                self._sessions[attempts] = session
            return session

    def fetch(
        self,
        url: str,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        min_length: int = 0
    ) -> str:
        timeout = timeout if timeout is not None else self.timeout
        attempts = max(1, retries if retries is not None else self.retries)
        session = self._session_for(attempts)

        try:
            return self._fetch_once(session, url, timeout, min_length)
        except FetchError as e:
            logger.error(f"Giving up on {url} after {attempts} attempt(s): {e}")
            raise

    def _fetch_once(self, session: requests.Session, url: str, timeout: float, min_length: int) -> str:
        try:
            response = session.get(url, headers=self.headers, timeout=timeout, verify=settings.VERIFY_SSL)
        except requests.exceptions.Timeout:
            raise FetchTimeout(f"Таймаут ({timeout:g} сек)", url)
        except requests.exceptions.RequestException as e:
            if _exhausted_by_timeouts(e):
                raise FetchTimeout(f"Таймаут ({timeout:g} сек)", url)
            raise FetchNetworkError(str(e), url)

        if response.status_code >= 400:
            raise FetchHttpError(response.status_code, url)

        # Cyrillic pages often omit the charset; requests would assume latin-1.
        if not response.encoding or response.encoding.lower() == 'iso-8859-1':
            response.encoding = response.apparent_encoding

        text = response.text
        if len(text.strip()) < min_length:
            raise EmptyResponse("Сайт вернул пустую страницу", url)
        return text

    def check_availability(self) -> AvailabilityResult:
        """One request to the base URL with a short timeout and no retries."""
        try:
            self.fetch(
                self.base_url,
                timeout=settings.AVAILABILITY_TIMEOUT_SECONDS,
                retries=1,
                min_length=settings.MIN_PAGE_LENGTH
            )
        except FetchError as e:
            logger.warning(f"Source unavailable: {self.base_url} - {e}")
            return AvailabilityResult(available=False, message=str(e))

        return AvailabilityResult(available=True, message="Сайт доступен")

def _exhausted_by_timeouts(error: requests.exceptions.RequestException) -> bool:
    """requests wraps an exhausted read/connect-timeout retry budget in a ConnectionError."""
    reason = error.args[0] if error.args else None
    if isinstance(reason, MaxRetryError):
        reason = reason.reason
    return isinstance(reason, (ReadTimeoutError, ConnectTimeoutError))
