from decimal import Decimal

import pytest

from Vesting_Ledger.vl_shared.amount import ZERO
from Vesting_Ledger.vl_shared.types import Vault
from Vesting_Ledger.vl_engine.calculator import (
    schedule_state,
    vault_summary,
    vested_amount,
    withdrawable_amount,
)
from .conftest import DAY, T0, THIRTY_DAYS, make_schedule


def _vault(*schedules) -> Vault:
    return Vault(
        address="0xvault",
        token_address="0xtoken",
        owner_address="0xowner",
        name="",
        total_amount=sum((s.top_up_amount for s in schedules), Decimal(0)),
        created_at=T0,
        version=0,
        sub_schedules=list(schedules),
    )


# ── vested_amount ──

def test_nothing_vested_before_start():
    s = make_schedule()
    assert vested_amount(s, T0 - 1) == ZERO


def test_nothing_vested_mid_cliff(cliff_schedule):
    assert vested_amount(cliff_schedule, T0 + 43_200_000) == ZERO


def test_vested_after_cliff(cliff_schedule):
    assert vested_amount(cliff_schedule, T0 + 90_000_000) > 0


def test_cliff_end_is_inclusive_start(cliff_schedule):
    assert vested_amount(cliff_schedule, T0 + DAY * 1000) == ZERO
    assert vested_amount(cliff_schedule, T0 + DAY * 1000 + 1) > 0


def test_linear_midpoint():
    s = make_schedule(amount="1000", duration=THIRTY_DAYS)
    assert vested_amount(s, T0 + THIRTY_DAYS * 500) == Decimal("500")


def test_linear_fraction_truncates():
    s = make_schedule(amount="1", duration=3)
    assert vested_amount(s, T0 + 1000) == Decimal("0.333333333333333333")


def test_fully_vested_exactly_at_end():
    s = make_schedule(amount="1000.123456789012345678", duration=7)
    assert vested_amount(s, s.vesting_end) == Decimal("1000.123456789012345678")


def test_fully_vested_after_end():
    s = make_schedule(amount="1000")
    assert vested_amount(s, s.vesting_end + 10 ** 9) == Decimal("1000")


def test_zero_duration_vests_at_start():
    s = make_schedule(amount="250", duration=0, cliff=DAY)
    assert vested_amount(s, s.vesting_start - 1) == ZERO
    assert vested_amount(s, s.vesting_start) == Decimal("250")


def test_vesting_is_monotonic():
    s = make_schedule(amount="999.999999999999999999", cliff=DAY, duration=THIRTY_DAYS)
    samples = range(T0 - 1000, s.vesting_end + 5000, 7_777_777)
    values = [vested_amount(s, t) for t in samples]
    assert values == sorted(values)


def test_vesting_monotonic_between_adjacent_ms():
    s = make_schedule(amount="1", duration=7)
    previous = ZERO
    for t in range(s.vesting_start, s.vesting_start + 7001, 13):
        current = vested_amount(s, t)
        assert current >= previous
        previous = current


# ── withdrawable_amount ──

def test_withdrawable_nets_out_withdrawn():
    s = make_schedule(amount="1000", withdrawn="200")
    assert withdrawable_amount(s, s.vesting_end) == Decimal("800")


def test_withdrawable_never_negative():
    s = make_schedule(amount="1000", withdrawn="600")
    assert withdrawable_amount(s, T0 + THIRTY_DAYS * 500) == ZERO


# ── schedule_state ──

@pytest.mark.parametrize("offset_ms, expected", [
    (-1, "PENDING"),
    (DAY * 1000 - 1, "PENDING"),
    (DAY * 1000, "VESTING"),
    ((DAY + THIRTY_DAYS) * 1000 - 1, "VESTING"),
    ((DAY + THIRTY_DAYS) * 1000, "FULLY_VESTED"),
])
def test_schedule_state_transitions(cliff_schedule, offset_ms, expected):
    assert schedule_state(cliff_schedule, T0 + offset_ms) == expected


def test_zero_duration_skips_vesting_state():
    s = make_schedule(duration=0)
    assert schedule_state(s, T0) == "FULLY_VESTED"


# ── vault_summary ──

def test_summary_of_empty_vault_is_zero():
    summary = vault_summary(_vault(), T0)
    assert summary.total_vested == ZERO
    assert summary.total_withdrawable == ZERO
    assert summary.total_withdrawn == ZERO


def test_summary_aggregates_schedules():
    a = make_schedule("a", amount="100", duration=0, withdrawn="40")
    b = make_schedule("b", amount="300", duration=0, sequence=2)
    pending = make_schedule("c", amount="500", cliff=DAY, sequence=3)

    summary = vault_summary(_vault(a, b, pending), T0)
    assert summary.total_vested == Decimal("400")
    assert summary.total_withdrawable == Decimal("360")
    assert summary.total_withdrawn == Decimal("40")


def test_summary_does_not_double_count():
    a = make_schedule("a", amount="100", duration=0)
    summary = vault_summary(_vault(a, a), T0)
    assert summary.total_vested == Decimal("100")
