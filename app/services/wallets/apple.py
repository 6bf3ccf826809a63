"""
Apple Wallet provider.

Apple passes embed the loyalty counters: the pass service renders cycle
visits and available rewards, and pushes the new pass to registered devices
itself. New passes are downloaded straight from the pass service with the
initial state in the query string.
"""

from typing import Optional
from urllib.parse import urlencode

import httpx

from app.core.config import settings
from app.domain.loyalty import INITIAL_COUNTERS, LoyaltyCounters
from app.services.wallets.base import WalletProvider, WalletProviderCallError, WalletReference


class AppleWalletProvider(WalletProvider):

    name = "apple"
    uses_embedded_counters = True

    def get_pass_url(self, customer_id: str, first_name: str, last_name: str) -> str:
        # The pass service rejects cantidad=0, passes start at the enrollment visit
        query = urlencode({
            "idUsuario": customer_id,
            "cantidad": str(INITIAL_COUNTERS.cycle_visits),
            "premiosDisponibles": str(INITIAL_COUNTERS.rewards_available),
            "nombre": first_name,
            "apellido": last_name,
            "codigoQR": customer_id,
        })
        return f"{self.base_url}/v1/crearPasses?{query}"

    def create_pass(
        self,
        customer_id: str,
        display_name: str,
        os_family: str,
        *,
        first_name: str = "",
        last_name: str = "",
    ) -> WalletReference:
        if not self.base_url:
            raise WalletProviderCallError("apple wallet API URL is not configured")

        if not first_name and not last_name:
            first_name = display_name

        return WalletReference(
            provider=self.name,
            url=self.get_pass_url(customer_id, first_name, last_name),
        )

    def update_pass_counters(self, customer_id: str, cycle_visits: int, rewards_available: int) -> None:
        self._post(
            "/v1/actualizarPase",
            {
                "idUsuario": customer_id,
                "cantidad": cycle_visits,
                "premiosDisponibles": rewards_available,
            },
            headers={"Accept": "application/vnd.apple.pkpass, application/json, */*"},
        )

    def notify(self, customer_id: str, message: str) -> None:
        self._post("/v1/notificacion", {"idUsuario": customer_id, "notificacion": message})

    def sync_scan(self, customer_id: str, counters: LoyaltyCounters, points_delta: int) -> None:
        self.update_pass_counters(customer_id, counters.cycle_visits, counters.rewards_available)

    def refresh_counters(self, customer_id: str, counters: LoyaltyCounters) -> None:
        self.update_pass_counters(customer_id, counters.cycle_visits, counters.rewards_available)

    def revert_scan(self, customer_id: str, counters: LoyaltyCounters, points_delta: int) -> None:
        self.update_pass_counters(customer_id, counters.cycle_visits, counters.rewards_available)


def create_apple_wallet_provider(http_client: Optional[httpx.Client] = None) -> AppleWalletProvider:
    """Factory function to create AppleWalletProvider from settings."""
    return AppleWalletProvider(
        base_url=settings.apple_wallet_api_url,
        timeout=settings.wallet_timeout_seconds,
        http_client=http_client,
    )
