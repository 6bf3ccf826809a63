"""
Wallet providers for Apple and Google Wallet passes.

This package provides:
- WalletProvider: Interface the enrollment and accrual services depend on
- AppleWalletProvider: Passes with embedded visit/reward counters
- GoogleWalletProvider: Passes with a points balance
- PassCoordinator: Picks the provider for a customer's OS family
"""

from .base import WalletProvider, WalletProviderCallError, WalletReference
from .apple import AppleWalletProvider, create_apple_wallet_provider
from .google import GoogleWalletProvider, create_google_wallet_provider
from .coordinator import PassCoordinator, create_pass_coordinator

__all__ = [
    "WalletProvider",
    "WalletProviderCallError",
    "WalletReference",
    "AppleWalletProvider",
    "create_apple_wallet_provider",
    "GoogleWalletProvider",
    "create_google_wallet_provider",
    "PassCoordinator",
    "create_pass_coordinator",
]
