from decimal import Decimal

import pytest

from Vesting_Ledger.vl_shared.types import SubSchedule

T0 = 1_704_067_200_000          # 2024-01-01T00:00:00Z in epoch ms
DAY = 86_400
THIRTY_DAYS = 2_592_000


def make_schedule(
    schedule_id: str = "s1",
    amount: str = "1000",
    cliff: int | None = None,
    duration: int = THIRTY_DAYS,
    top_up_at: int = T0,
    withdrawn: str = "0",
    created_at: int | None = None,
    sequence: int = 1,
) -> SubSchedule:
    return SubSchedule(
        id=schedule_id,
        vault_address="0xvault",
        top_up_amount=Decimal(amount),
        cliff_duration=cliff,
        vesting_duration=duration,
        top_up_timestamp=top_up_at,
        vesting_start=top_up_at + (cliff or 0) * 1000,
        amount_withdrawn=Decimal(withdrawn),
        transaction_hash=f"0xtx_{schedule_id}",
        block_number=100 + sequence,
        created_at=created_at if created_at is not None else top_up_at,
        sequence=sequence,
    )


@pytest.fixture
def cliff_schedule():
    """1000 tokens, 1 day cliff, 30 day linear vesting."""
    return make_schedule(cliff=DAY, duration=THIRTY_DAYS)
