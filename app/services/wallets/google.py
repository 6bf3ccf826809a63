"""
Google Wallet provider.

Google passes hold a points balance. A pass is issued in two steps: the pass
service creates the wallet object for the customer, then signs it and
returns the "save to Google Wallet" link. Scans send signed point deltas.
"""

import logging
from typing import Any, Optional

import httpx

from app.core.config import settings
from app.domain.loyalty import LoyaltyCounters
from app.services.wallets.base import WalletProvider, WalletReference

logger = logging.getLogger(__name__)

# Keys the pass service has used for the save link, in order of preference
LINK_KEYS = ("addToGoogleWalletUrl", "saveUrl", "url", "link", "saveLink", "walletUrl")


def extract_link(data: Any) -> Optional[str]:
    """Find the save link in a pass service response (JSON object or bare URL)."""
    if not data:
        return None
    if isinstance(data, str):
        return data if data.startswith("http") else None
    if isinstance(data, dict):
        for key in LINK_KEYS:
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return None


class GoogleWalletProvider(WalletProvider):

    name = "google"
    uses_embedded_counters = False

    def __init__(
        self,
        base_url: str,
        class_id: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ):
        super().__init__(base_url, timeout=timeout, http_client=http_client)
        self.class_id = class_id

    def create_pass(
        self,
        customer_id: str,
        display_name: str,
        os_family: str,
        *,
        first_name: str = "",
        last_name: str = "",
    ) -> WalletReference:
        created = self._post("/createObject", {
            "classId": self.class_id,
            "idUsuario": customer_id,
            "nombreUsuario": display_name,
        })
        signed = self._post("/firma", {"idUsuario": customer_id})

        url = extract_link(signed) or extract_link(created)
        if not url:
            logger.warning(f"[google] Pass for {customer_id} issued without a save link")
        return WalletReference(provider=self.name, url=url)

    def adjust_points(self, customer_id: str, delta: int) -> None:
        self._post("/actualizar", {"idUsuario": customer_id, "cantidadPuntos": delta})

    def notify(self, customer_id: str, message: str) -> None:
        self._post("/notificacion", {"idUsuario": customer_id, "notificacion": message})

    def sync_scan(self, customer_id: str, counters: LoyaltyCounters, points_delta: int) -> None:
        self.adjust_points(customer_id, points_delta)

    def revert_scan(self, customer_id: str, counters: LoyaltyCounters, points_delta: int) -> None:
        self.adjust_points(customer_id, -points_delta)


def create_google_wallet_provider(http_client: Optional[httpx.Client] = None) -> GoogleWalletProvider:
    """Factory function to create GoogleWalletProvider from settings."""
    return GoogleWalletProvider(
        base_url=settings.google_wallet_api_url,
        class_id=settings.google_wallet_class_id,
        timeout=settings.wallet_timeout_seconds,
        http_client=http_client,
    )
