import pytest
import fakeredis

from Vesting_Ledger.vl_db.ledger import VestingLedger
from Vesting_Ledger.vl_db.stats import LedgerReporter

T0 = 1_704_067_200_000          # 2024-01-01T00:00:00Z in epoch ms
DAY = 86_400
THIRTY_DAYS = 2_592_000

VAULT = "0x9876543210987654321098765432109876543210"
OWNER = "0x1111111111111111111111111111111111111111"
TOKEN = "0x2222222222222222222222222222222222222222"


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds * 1000


@pytest.fixture
def ledger_client():
    r = fakeredis.FakeRedis()
    yield r
    r.flushdb()
    r.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audit_records():
    return []


@pytest.fixture
def ledger(ledger_client, clock, audit_records):
    return VestingLedger(ledger_client, clock=clock, audit_sink=audit_records.append, actor="indexer")


@pytest.fixture
def reporter(ledger):
    return LedgerReporter(ledger)


@pytest.fixture
def vault(ledger):
    return ledger.create_vault(VAULT, TOKEN, OWNER, name="Team Vesting")


def top_up(ledger, amount="100", tx="0xtx1", cliff=None, duration=THIRTY_DAYS, timestamp=T0, block=1):
    return ledger.apply_top_up(VAULT, amount, cliff, duration, tx, block, timestamp)
