"""Tests for the pure visit/redemption transitions."""

from app.domain.loyalty import (
    CYCLE_LENGTH,
    INITIAL_COUNTERS,
    LoyaltyCounters,
    ScanMode,
    apply_redemption,
    apply_scan,
    apply_visit,
    display_name,
    reward_earned,
)


class TestVisit:

    def test_visit_advances_cycle(self) -> None:
        after = apply_visit(LoyaltyCounters(3, 3, 0, 0))
        assert after == LoyaltyCounters(4, 4, 0, 0)

    def test_visit_past_cycle_length_rolls_over(self) -> None:
        after = apply_visit(LoyaltyCounters(10, 10, 0, 0))
        assert after.cycle_visits == 1
        assert after.rewards_available == 1
        assert after.visits_total == 11

    def test_cycle_stays_in_range_over_many_visits(self) -> None:
        counters = INITIAL_COUNTERS
        rewards_seen = 0
        for _ in range(95):
            before = counters
            counters = apply_visit(counters)
            assert 1 <= counters.cycle_visits <= CYCLE_LENGTH
            if reward_earned(before, counters):
                rewards_seen += 1
                assert counters.rewards_available == before.rewards_available + 1
                assert before.cycle_visits == CYCLE_LENGTH
        assert counters.visits_total == 96
        assert counters.rewards_available == rewards_seen == 9

    def test_visit_keeps_redeemed_count(self) -> None:
        assert apply_visit(LoyaltyCounters(5, 5, 2, 7)).rewards_redeemed == 7


class TestRedemption:

    def test_redemption_spends_one_reward(self) -> None:
        after = apply_redemption(LoyaltyCounters(25, 4, 1, 2))
        assert after == LoyaltyCounters(25, 4, 0, 3)

    def test_redemption_never_goes_negative(self) -> None:
        assert apply_redemption(LoyaltyCounters(5, 5, 0, 0)).rewards_available == 0

    def test_apply_scan_dispatches_on_mode(self) -> None:
        start = LoyaltyCounters(10, 10, 1, 0)
        assert apply_scan(start, ScanMode.VISIT) == apply_visit(start)
        assert apply_scan(start, ScanMode.REDEMPTION) == apply_redemption(start)


class TestRecords:

    def test_from_record_treats_missing_fields_as_zero(self) -> None:
        assert LoyaltyCounters.from_record({"visits_total": 4}) == LoyaltyCounters(4, 0, 0, 0)

    def test_initial_counters_count_the_signup_visit(self) -> None:
        assert INITIAL_COUNTERS.as_dict() == {
            "visits_total": 1,
            "cycle_visits": 1,
            "rewards_available": 0,
            "rewards_redeemed": 0,
        }

    def test_display_name(self) -> None:
        assert display_name({"name": " Ana ", "surname": "Lopez"}) == "Ana Lopez"
        assert display_name({"name": "Ana", "surname": None}) == "Ana"
        assert display_name({}) == "--"
