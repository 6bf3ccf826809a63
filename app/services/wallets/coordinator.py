"""
Pass Coordinator for wallet provider selection.

Customers enrolled from an iPhone get an Apple Wallet pass, everyone else a
Google Wallet pass. The coordinator is the only place that maps an OS family
to a provider.
"""

from typing import Optional

from app.domain.loyalty import OS_IOS
from app.services.wallets.apple import AppleWalletProvider, create_apple_wallet_provider
from app.services.wallets.base import WalletProvider
from app.services.wallets.google import GoogleWalletProvider, create_google_wallet_provider


class PassCoordinator:

    def __init__(
        self,
        apple: Optional[AppleWalletProvider] = None,
        google: Optional[GoogleWalletProvider] = None,
    ):
        self._apple = apple
        self._google = google

    @property
    def apple(self) -> AppleWalletProvider:
        """Lazy-initialize Apple Wallet provider."""
        if self._apple is None:
            self._apple = create_apple_wallet_provider()
        return self._apple

    @property
    def google(self) -> GoogleWalletProvider:
        """Lazy-initialize Google Wallet provider."""
        if self._google is None:
            self._google = create_google_wallet_provider()
        return self._google

    def for_os_family(self, os_family: str | None) -> WalletProvider:
        if (os_family or "").strip().lower() == OS_IOS:
            return self.apple
        return self.google

    def for_customer(self, customer: dict) -> WalletProvider:
        return self.for_os_family(customer.get("os_family"))

    def close(self) -> None:
        """Release HTTP connections of the providers created so far."""
        for provider in (self._apple, self._google):
            if provider is not None:
                provider.close()


def create_pass_coordinator() -> PassCoordinator:
    """Factory function to create PassCoordinator."""
    return PassCoordinator()
