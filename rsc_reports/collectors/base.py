"""Base collector interface and the fetch error hierarchy."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class BaseCollector(ABC):
    """Abstract base class for RSC report collectors.

    Every report (one object type, a merged multi-query gatherer, or an
    aggregate such as backup success rate) implements this interface so
    callers can run and describe them uniformly.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this collector.

        Returns:
            A short, lowercase identifier (e.g., 'vsphere_vms', 'sla_domains')
        """
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name for output headers.

        Returns:
            A user-friendly name (e.g., 'vSphere VMs', 'SLA Domains')
        """
        pass

    @abstractmethod
    def collect(self) -> List[Dict[str, Any]]:
        """Fetch current data and return flat records.

        Returns:
            List of flat records. Field sets vary by collector.

        Raises:
            CollectorError: If data collection fails.
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this collector can run (a session exists).

        Returns:
            True if the collector can operate, False otherwise.
        """
        pass

    def get_status(self) -> Dict[str, Any]:
        """Get collector status information.

        Returns:
            Dictionary with status details including availability.
        """
        return {
            "name": self.name,
            "display_name": self.display_name,
            "available": self.is_available(),
        }


class CollectorError(Exception):
    """Exception raised when a collector fails to collect data."""

    retryable = False

    def __init__(self, collector_name: str, message: str, cause: Optional[Exception] = None):
        self.collector_name = collector_name
        self.cause = cause
        super().__init__(f"[{collector_name}] {message}")


class NotConnectedError(CollectorError):
    """No RSC session is available; nothing was sent."""


class TransientError(CollectorError):
    """Network failure, timeout, throttling or server-side error.

    Raised only after the session's own retries are exhausted. Safe to retry
    later.
    """

    retryable = True

    def __init__(
        self,
        collector_name: str,
        message: str,
        cause: Optional[Exception] = None,
        status_code: Optional[int] = None,
    ):
        self.status_code = status_code
        super().__init__(collector_name, message, cause)


class AuthenticationError(CollectorError):
    """The session token was rejected (HTTP 401/403)."""

    def __init__(
        self,
        collector_name: str,
        message: str,
        cause: Optional[Exception] = None,
        status_code: Optional[int] = None,
    ):
        self.status_code = status_code
        super().__init__(collector_name, message, cause)


class TLSError(CollectorError):
    """TLS handshake or certificate verification failed.

    A trust configuration problem (``verify`` or ``ca_bundle``), not a
    network hiccup. Retrying will not help.
    """


class SchemaError(CollectorError):
    """The request or response did not match the expected GraphQL shape.

    Covers rejected queries, GraphQL ``errors`` arrays, non-JSON bodies and
    missing connection paths. Retrying will not help.
    """

    def __init__(
        self,
        collector_name: str,
        message: str,
        cause: Optional[Exception] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        self.errors = errors or []
        super().__init__(collector_name, message, cause)
