import pytest
import fakeredis

from Vesting_Ledger.vl_db.ledger import VestingLedger

T0 = 1_704_067_200_000          # 2024-01-01T00:00:00Z

VAULT = "0xvault98765432109876543210987654321098765432"
OWNER = "0xowner11111111111111111111111111111111111111"
TOKEN = "0xtoken22222222222222222222222222222222222222"


@pytest.fixture
def redis_client():
    r = fakeredis.FakeRedis(decode_responses=False)
    yield r
    r.flushdb()
    r.close()


@pytest.fixture
def ledger(redis_client) -> VestingLedger:
    ledger = VestingLedger(redis_client, clock=lambda: T0, audit_sink=lambda record: None)
    ledger.create_vault(VAULT, TOKEN, OWNER, beneficiaries={OWNER: "1000"})
    return ledger


def top_up_event(**overrides) -> dict:
    event = {
        "vault_address": VAULT,
        "amount": "200.0",
        "cliff_duration": 172800,
        "vesting_duration": 2592000,
        "transaction_hash": "0xindex1234567890abcdef1234567890abcdef1234567890abcdef1234567890",
        "block_number": 12345,
        "timestamp": "2024-01-01T00:00:00Z",
    }
    event.update(overrides)
    return event
