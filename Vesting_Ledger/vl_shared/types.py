from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

@dataclass
class SubSchedule:
    id:               str
    vault_address:    str
    top_up_amount:    Decimal
    cliff_duration:   Optional[int]     # seconds, None = no cliff
    vesting_duration: int               # seconds, 0 = vests at vesting_start
    top_up_timestamp: int               # epoch ms
    vesting_start:    int               # epoch ms
    amount_withdrawn: Decimal
    transaction_hash: str
    block_number:     int
    created_at:       int               # epoch ms
    sequence:         int

    @property
    def cliff_end(self) -> Optional[int]:
        if self.cliff_duration is None:
            return None
        return self.vesting_start

    @property
    def vesting_end(self) -> int:
        return self.vesting_start + self.vesting_duration * 1000

@dataclass
class Beneficiary:
    address:         str
    total_allocated: Decimal
    total_withdrawn: Decimal

@dataclass
class Vault:
    address:       str
    token_address: str
    owner_address: str
    name:          str
    total_amount:  Decimal
    created_at:    int
    version:       int
    sub_schedules: list[SubSchedule] = field(default_factory=list)
    beneficiaries: list[Beneficiary] = field(default_factory=list)

@dataclass
class VaultSummary:
    vault_address:      str
    as_of:              int
    total_vested:       Decimal
    total_withdrawable: Decimal
    total_withdrawn:    Decimal

@dataclass(frozen=True)
class Allocation:
    sub_schedule_id: str
    amount:          Decimal

@dataclass
class WithdrawalResult:
    vault_address:          str
    as_of:                  int
    amount_withdrawn:       Decimal
    distribution:           list[Allocation]
    remaining_withdrawable: Decimal

@dataclass(frozen=True)
class AuditRecord:
    actor:         str
    action:        str
    vault_address: str
    amount:        Decimal
    timestamp:     int

@dataclass
class ScheduleReport:
    id:                 str
    state:              str
    top_up_amount:      Decimal
    vested_amount:      Decimal
    withdrawable_amount: Decimal
    amount_withdrawn:   Decimal
    cliff_duration:     Optional[int]
    vesting_duration:   int
    vesting_start:      int
    vesting_end:        int
    transaction_hash:   str
    block_number:       int

@dataclass
class VaultReport:
    vault_address:       str
    token_address:       str
    owner_address:       str
    name:                str
    total_amount:        Decimal
    total_top_ups:       int
    summary:             VaultSummary
    sub_schedules:       list[ScheduleReport]
    beneficiaries:       list[Beneficiary]

@dataclass
class TVLReport:
    total_value_locked:  Decimal
    active_vaults_count: int
    per_token:           dict[str, Decimal]
    as_of:               int

@dataclass
class HealthStatus:
    ledger_connected:  bool
    ledger_key_count:  int
    vault_count:       int
    uptime_seconds:    float
    registry_ok:       bool
    orphaned_vaults:   list[str]
