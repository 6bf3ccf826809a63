"""
Loyalty counters and the visit/redemption transitions.

A customer's loyalty state is four counters. A visit advances the cycle; the
visit that would take the cycle past CYCLE_LENGTH starts a new cycle at 1 and
banks one reward. A redemption spends a banked reward and never touches the
visit counters.

Everything here is pure: no I/O, no clock. The accrual engine decides when a
transition is allowed and persists the result.
"""
from dataclasses import asdict, dataclass
from enum import Enum

CYCLE_LENGTH = 10

OS_IOS = "ios"
OS_ANDROID = "android"


class ScanMode(str, Enum):
    VISIT = "visit"
    REDEMPTION = "redemption"


@dataclass(frozen=True)
class LoyaltyCounters:
    visits_total: int
    cycle_visits: int
    rewards_available: int
    rewards_redeemed: int

    @classmethod
    def from_record(cls, record: dict) -> "LoyaltyCounters":
        """Read counters from a customer row; missing fields count as 0."""
        return cls(
            visits_total=int(record.get("visits_total") or 0),
            cycle_visits=int(record.get("cycle_visits") or 0),
            rewards_available=int(record.get("rewards_available") or 0),
            rewards_redeemed=int(record.get("rewards_redeemed") or 0),
        )

    def as_dict(self) -> dict:
        return asdict(self)


# Enrollment counts as the customer's first visit.
INITIAL_COUNTERS = LoyaltyCounters(
    visits_total=1,
    cycle_visits=1,
    rewards_available=0,
    rewards_redeemed=0,
)


def apply_visit(counters: LoyaltyCounters) -> LoyaltyCounters:
    cycle_visits = counters.cycle_visits + 1
    rewards_available = counters.rewards_available
    if cycle_visits > CYCLE_LENGTH:
        cycle_visits = 1
        rewards_available += 1
    return LoyaltyCounters(
        visits_total=counters.visits_total + 1,
        cycle_visits=cycle_visits,
        rewards_available=rewards_available,
        rewards_redeemed=counters.rewards_redeemed,
    )


def apply_redemption(counters: LoyaltyCounters) -> LoyaltyCounters:
    """Spend one reward.

    Callers check availability first; the floor at 0 only guards the
    invariant.
    """
    return LoyaltyCounters(
        visits_total=counters.visits_total,
        cycle_visits=counters.cycle_visits,
        rewards_available=max(0, counters.rewards_available - 1),
        rewards_redeemed=counters.rewards_redeemed + 1,
    )


def apply_scan(counters: LoyaltyCounters, mode: ScanMode) -> LoyaltyCounters:
    if mode == ScanMode.REDEMPTION:
        return apply_redemption(counters)
    return apply_visit(counters)


def reward_earned(before: LoyaltyCounters, after: LoyaltyCounters) -> bool:
    """True when a visit closed a cycle and banked a reward."""
    return after.rewards_available > before.rewards_available


def display_name(customer: dict) -> str:
    full = " ".join(
        part.strip() for part in (customer.get("name") or "", customer.get("surname") or "") if part.strip()
    )
    return full or "--"
