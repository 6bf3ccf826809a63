"""
Accrual engine: turns a scanned loyalty card into a visit or a redemption.

A scan is accepted only after every precondition holds and the customer's
wallet pass has acknowledged the new state; the customer record is written
last. The write is optimistic (customers.version): if a concurrent scan of
the same customer committed first, the transition is re-applied to the fresh
record and written again. A re-applied redemption that finds no reward left
is refused and the pass is rolled back; any other re-applied scan is always
written, since the wallet has already acknowledged it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from app.core.clock import utcnow
from app.core.config import settings
from app.core.errors import (
    CommitConflict,
    CustomerInactive,
    CustomerNotFound,
    MalformedPayload,
    NoRewardsAvailable,
    TenantMismatch,
    WalletSyncFailed,
)
from app.domain.loyalty import (
    CYCLE_LENGTH,
    LoyaltyCounters,
    ScanMode,
    apply_scan,
    display_name,
    reward_earned,
)
from app.repositories.customer import CustomerRepository
from app.services.scan_payload import ScanPayload, parse_scan_payload
from app.services.wallets import (
    PassCoordinator,
    WalletProvider,
    WalletProviderCallError,
    create_pass_coordinator,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccrualResult:
    customer_id: str
    display_name: str
    mode: ScanMode
    visits_total: int
    cycle_visits: int
    rewards_available: int
    rewards_redeemed: int
    reward_earned: bool
    summary: str


def build_summary(name: str, mode: ScanMode, counters: LoyaltyCounters, earned: bool) -> str:
    action = "Reward redeemed by" if mode == ScanMode.REDEMPTION else "Visit granted to"
    summary = (
        f"{action} {name}. Cycle: {counters.cycle_visits}/{CYCLE_LENGTH} | "
        f"Total visits: {counters.visits_total} | Rewards: {counters.rewards_available}"
    )
    if earned:
        summary += " | New reward earned!"
    return summary


class AccrualEngine:

    def __init__(
        self,
        customers=CustomerRepository,
        wallets: Optional[PassCoordinator] = None,
        clock: Callable[[], datetime] = utcnow,
        max_commit_attempts: Optional[int] = None,
    ):
        self._customers = customers
        self._wallets = wallets or create_pass_coordinator()
        self._clock = clock
        self._max_commit_attempts = max_commit_attempts or settings.accrual_max_commit_attempts

    def process_scan(
        self,
        business_id: str,
        payload: Union[ScanPayload, str],
        mode: ScanMode,
    ) -> AccrualResult:
        """Apply a visit or a redemption for the customer on a scanned card.

        Args:
            business_id: The scanning business
            payload: Decoded QR payload, or the raw QR text
            mode: ScanMode.VISIT or ScanMode.REDEMPTION

        Raises:
            MalformedPayload, TenantMismatch, CustomerNotFound,
            CustomerInactive, NoRewardsAvailable, WalletSyncFailed,
            CommitConflict
        """
        if isinstance(payload, str):
            payload = parse_scan_payload(payload)
        mode = ScanMode(mode)

        customer_id = payload.customer_id
        if not customer_id:
            raise MalformedPayload("The QR code does not contain a customer id. Scan again.")

        if payload.business_id and payload.business_id != business_id:
            raise TenantMismatch("This card belongs to another business.")

        customer = self._customers.get(business_id, customer_id)
        if not customer:
            raise CustomerNotFound("This card does not belong to your business.")

        if not customer.get("active", True):
            raise CustomerInactive("This customer is deactivated. The scan was not registered.")

        before = LoyaltyCounters.from_record(customer)
        if mode == ScanMode.REDEMPTION and before.rewards_available <= 0:
            raise NoRewardsAvailable("This customer has no rewards available.")

        after = apply_scan(before, mode)
        points = abs(payload.points)
        delta = -points if mode == ScanMode.REDEMPTION else points

        provider = self._wallets.for_customer(customer)
        try:
            provider.sync_scan(customer_id, after, delta)
        except WalletProviderCallError as e:
            logger.warning(f"Scan of {customer_id} for business {business_id} rejected, wallet sync failed: {e}")
            raise WalletSyncFailed("We couldn't update the customer's pass. Scan again.") from e

        saved, base, committed = self._commit(business_id, customer, mode, after, provider, delta)

        earned = mode == ScanMode.VISIT and reward_earned(base, committed)
        name = display_name(saved)
        logger.info(
            f"{mode.value} for customer {customer_id} of business {business_id}: "
            f"cycle={committed.cycle_visits} total={committed.visits_total} "
            f"rewards={committed.rewards_available} redeemed={committed.rewards_redeemed}"
        )
        return AccrualResult(
            customer_id=customer_id,
            display_name=name,
            mode=mode,
            visits_total=committed.visits_total,
            cycle_visits=committed.cycle_visits,
            rewards_available=committed.rewards_available,
            rewards_redeemed=committed.rewards_redeemed,
            reward_earned=earned,
            summary=build_summary(name, mode, committed, earned),
        )

    def _commit(
        self,
        business_id: str,
        customer: dict,
        mode: ScanMode,
        target: LoyaltyCounters,
        provider: WalletProvider,
        points_delta: int,
    ) -> tuple[dict, LoyaltyCounters, LoyaltyCounters]:
        """Write target counters, re-applying the scan on version conflicts.

        A redemption that lost the race to a write leaving no reward
        available is refused, and the pass is rolled back with revert_scan.

        Returns the saved row, the counters the write was computed from, and
        the counters actually written.
        """
        customer_id = customer["id"]
        current = customer
        recomputed = False

        for attempt in range(1, self._max_commit_attempts + 1):
            saved = self._customers.update_counters(
                business_id,
                customer_id,
                int(current.get("version") or 1),
                target.as_dict(),
                self._clock(),
            )
            if saved is not None:
                if recomputed:
                    self._refresh_wallet(provider, customer_id, target)
                return saved, LoyaltyCounters.from_record(current), target

            logger.warning(
                f"Concurrent update of customer {customer_id}, re-applying {mode.value} "
                f"(attempt {attempt}/{self._max_commit_attempts})"
            )
            current = self._customers.get(business_id, customer_id)
            if current is None:
                break
            fresh = LoyaltyCounters.from_record(current)
            if mode == ScanMode.REDEMPTION and fresh.rewards_available <= 0:
                self._revert_wallet(provider, customer_id, fresh, points_delta)
                raise NoRewardsAvailable("The last reward of this customer was just redeemed on another device.")
            target = apply_scan(fresh, mode)
            recomputed = True

        logger.error(f"Gave up committing {mode.value} for customer {customer_id} after concurrent updates")
        raise CommitConflict("The card was updated from another device at the same time. Check the card before scanning again.")

    def _refresh_wallet(self, provider: WalletProvider, customer_id: str, counters: LoyaltyCounters) -> None:
        """Realign an absolute-value pass with the recomputed counters.

        The record is already committed, so a failure here leaves the pass one
        scan behind until the next update; it is logged, not raised.
        """
        try:
            provider.refresh_counters(customer_id, counters)
        except WalletProviderCallError as e:
            logger.error(f"Pass of customer {customer_id} left out of date after concurrent scans: {e}")

    def _revert_wallet(
        self,
        provider: WalletProvider,
        customer_id: str,
        counters: LoyaltyCounters,
        points_delta: int,
    ) -> None:
        try:
            provider.revert_scan(customer_id, counters, points_delta)
        except WalletProviderCallError as e:
            logger.error(f"Could not roll back the pass of customer {customer_id} after a refused redemption: {e}")
        else:
            logger.warning(f"Redemption for customer {customer_id} refused after a concurrent redemption; pass rolled back")
