import logging
from typing import Any
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import settings
from .errors import UpstreamError

logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)


class BigCommerceClient:
    """
    Thin transport over the BigCommerce V2 REST API.

    `get_json` is the one capability the report needs: GET a URL, return the
    decoded JSON, or raise UpstreamError. Retries with backoff are mounted on the
    session here so the report logic itself never retries.
    """

    def __init__(
        self,
        store_hash: str | None = None,
        token: str | None = None,
        base_url: str = settings.API_BASE_URL,
        timeout: float = settings.HTTP_TIMEOUT,
        retry_attempts: int = settings.HTTP_RETRY_ATTEMPTS,
        pool_size: int = 32,
    ):
        self.store_hash = store_hash or settings.API_HASH
        token = token or settings.API_TOKEN
        if not self.store_hash or not token:
            raise ValueError("API_HASH and API_TOKEN must be set (environment or .env).")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = self._create_session(token, retry_attempts, pool_size)

    def _create_session(self, token: str, retry_attempts: int, pool_size: int) -> requests.Session:
        """Session with auth headers and retry logic shared by every worker thread."""
        session = requests.Session()
        session.headers.update(
            {
                "X-Auth-Token": token,
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )
        retry = Retry(
            total=retry_attempts,
            backoff_factor=0.5,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=frozenset(["GET"]),
            respect_retry_after_header=True,
            raise_on_status=False,
        )
        # Pool sized for the line-item fan-out so threads don't queue on connections
        adapter = HTTPAdapter(max_retries=retry, pool_connections=pool_size, pool_maxsize=pool_size)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    @property
    def orders_url(self) -> str:
        return f"{self.base_url}/stores/{self.store_hash}/v2/orders"

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        GETs `url` and returns the decoded body. An empty body (the V2 API answers
        204 No Content for an empty listing) decodes to an empty list.
        """
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Request to {url} failed: {e}", url=url) from e

        if not response.ok:
            raise UpstreamError(
                f"{url} answered HTTP {response.status_code}: {response.text[:200]}",
                url=url,
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return []

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"{url} returned a body that is not JSON: {e}",
                url=url,
                status_code=response.status_code,
            ) from e

    def close(self):
        self.session.close()

    def __enter__(self) -> "BigCommerceClient":
        return self

    def __exit__(self, *exc_info):
        self.close()
