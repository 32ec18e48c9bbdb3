"""RSC session handle.

Holds the console URL and the opaque session header produced by whatever
login routine the caller uses, and owns the pooled HTTP session every
GraphQL call goes through.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Union

import certifi
import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .base import NotConnectedError

DEFAULT_USER_AGENT = "rsc-reports/1.0"
DEFAULT_STATUS_FORCELIST = (429, 502, 503, 504)


def normalize_base_url(url: str) -> str:
    """Return ``https://host[/path]`` without a trailing slash."""
    url = (url or "").strip()
    if not url:
        return ""
    if "://" not in url:
        url = f"https://{url}"
    return url.rstrip("/")


class RSCConnection:
    """Connection to one RSC tenant.

    The access token is obtained outside this package (service account
    login, browser session, etc.) and passed in as-is.
    """

    def __init__(
        self,
        url: str,
        access_token: Optional[str] = None,
        *,
        timeout: int = 60,
        verify: bool = True,
        ca_bundle: Optional[str] = None,
        retry_total: int = 3,
        backoff_factor: float = 0.5,
        status_forcelist: Iterable[int] = DEFAULT_STATUS_FORCELIST,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.url = normalize_base_url(url)
        self.access_token = access_token
        self.timeout = timeout
        self.retry_total = retry_total
        self.backoff_factor = backoff_factor
        self.status_forcelist = tuple(status_forcelist)
        self.user_agent = user_agent
        self._verify = self._determine_verify(verify, ca_bundle)
        self._session: Optional[requests.Session] = None

        if self._verify is False:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @classmethod
    def from_config(cls, config) -> "RSCConnection":
        """Build a connection from a :class:`rsc_reports.config.Config`."""
        return cls(
            config.rsc.url,
            config.rsc.access_token,
            timeout=config.rsc.timeout,
            verify=config.rsc.verify,
            ca_bundle=config.rsc.ca_bundle,
            retry_total=config.retry.total,
            backoff_factor=config.retry.backoff_factor,
            status_forcelist=config.retry.status_forcelist,
        )

    @property
    def graphql_url(self) -> str:
        return f"{self.url}/api/graphql"

    @property
    def console_url(self) -> str:
        """Base for browser deep links."""
        return self.url

    @property
    def headers(self) -> Dict[str, str]:
        """Session header sent with every request."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def is_connected(self) -> bool:
        return bool(self.url and self.access_token)

    def ensure_connected(self) -> None:
        """Raise NotConnectedError unless a session exists."""
        if not self.url:
            raise NotConnectedError("connection", "No RSC URL configured.")
        if not self.access_token:
            raise NotConnectedError(
                "connection",
                f"No session for {self.url}; supply an access token before querying.",
            )

    def _determine_verify(self, verify: bool, ca_bundle: Optional[str]) -> Union[bool, str]:
        """Determine SSL verification setting."""
        if not verify:
            return False
        if ca_bundle:
            return ca_bundle
        return certifi.where()

    def get_session(self) -> requests.Session:
        """Get or create a requests session with retry configuration.

        Reuses the session for connection pooling. Every call is a read-only
        GraphQL query, so POST is retried alongside the idempotent verbs.
        """
        if self._session is None:
            session = requests.Session()
            retry = Retry(
                total=self.retry_total,
                connect=self.retry_total,
                read=self.retry_total,
                backoff_factor=self.backoff_factor,
                status_forcelist=self.status_forcelist,
                allowed_methods=("GET", "HEAD", "POST"),
                raise_on_status=False,
                respect_retry_after_header=True,
            )
            adapter = HTTPAdapter(
                max_retries=retry,
                pool_connections=2,
                pool_maxsize=4,
            )
            session.mount("https://", adapter)
            session.mount("http://", adapter)
            session.verify = self._verify
            session.headers.update({"User-Agent": self.user_agent})
            self._session = session
        return self._session

    def close(self) -> None:
        """Close the session and release resources."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "RSCConnection":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "connected" if self.is_connected() else "not connected"
        return f"RSCConnection({self.url!r}, {state})"
