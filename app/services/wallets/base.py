"""
Common interface for the remote wallet services.

Each OS family talks to its own pass service over HTTP/JSON. Providers
differ in how a pass mirrors loyalty state:

- embedded counters: the pass shows cycle visits and rewards, so every
  scan pushes the new absolute values;
- points balance: the pass holds a running balance, so every scan pushes
  a signed delta.

The accrual engine only calls sync_scan / refresh_counters / revert_scan and never
branches on the OS family itself.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from app.domain.loyalty import LoyaltyCounters

logger = logging.getLogger(__name__)


class WalletProviderCallError(Exception):
    """A wallet service call failed, timed out, or was not acknowledged."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class WalletReference:
    provider: str
    url: Optional[str] = None  # Pass download / save link handed to the customer


class WalletProvider(ABC):

    name: str = "wallet"
    uses_embedded_counters: bool = False

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.Client:
        """Lazy-initialize HTTP client with a bounded timeout."""
        if self._http_client is None:
            self._http_client = httpx.Client(
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._http_client

    def _post(self, path: str, body: dict, headers: dict | None = None) -> Any:
        """POST a JSON body and return the parsed response (JSON, else text).

        Raises:
            WalletProviderCallError: base URL missing, transport error,
                timeout, or non-2xx status
        """
        if not self.base_url:
            raise WalletProviderCallError(f"{self.name} wallet API URL is not configured")

        try:
            response = self.http_client.post(f"{self.base_url}{path}", json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"[{self.name}] Network error on {path}: {e}")
            raise WalletProviderCallError(f"{self.name} wallet service unreachable: {e}") from e

        if response.is_error:
            logger.warning(f"[{self.name}] Error on {path} (status {response.status_code}): {response.text}")
            raise WalletProviderCallError(
                f"{self.name} wallet service answered {response.status_code}: {response.text or 'no body'}",
                status_code=response.status_code,
            )

        logger.info(f"[{self.name}] OK {path} (status {response.status_code})")
        try:
            return response.json()
        except ValueError:
            return response.text

    @abstractmethod
    def create_pass(
        self,
        customer_id: str,
        display_name: str,
        os_family: str,
        *,
        first_name: str = "",
        last_name: str = "",
    ) -> WalletReference:
        """Issue a pass for a customer who has no record yet."""

    def update_pass_counters(self, customer_id: str, cycle_visits: int, rewards_available: int) -> None:
        raise WalletProviderCallError(f"{self.name} passes do not carry embedded counters")

    def adjust_points(self, customer_id: str, delta: int) -> None:
        raise WalletProviderCallError(f"{self.name} passes do not carry a points balance")

    @abstractmethod
    def notify(self, customer_id: str, message: str) -> None:
        """Show a message on the customer's pass."""

    @abstractmethod
    def sync_scan(self, customer_id: str, counters: LoyaltyCounters, points_delta: int) -> None:
        """Mirror one accepted scan on the pass.

        Args:
            counters: State after the scan
            points_delta: Signed points for balance-style passes
        """

    def refresh_counters(self, customer_id: str, counters: LoyaltyCounters) -> None:
        """Re-send absolute state after the local write had to be recomputed.

        Balance-style passes already received their delta, so the default is
        to do nothing.
        """

    @abstractmethod
    def revert_scan(self, customer_id: str, counters: LoyaltyCounters, points_delta: int) -> None:
        """Undo a scan already mirrored by sync_scan that could not be committed.

        Args:
            counters: The committed state the pass must show again
            points_delta: The delta sync_scan sent
        """

    def close(self) -> None:
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None
