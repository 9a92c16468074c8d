from typing import Optional

from Vesting_Ledger.vl_shared.amount import ZERO, add, sub, total
from Vesting_Ledger.vl_shared.types import ScheduleReport, TVLReport, VaultReport
from Vesting_Ledger.vl_engine import calculator
from Vesting_Ledger.vl_engine.distributor import fifo_order
from Vesting_Ledger.vl_db.ledger import VestingLedger


class LedgerReporter:
    def __init__(self, ledger: VestingLedger):
        self.ledger = ledger

    def _as_of(self, as_of) -> int:
        return self.ledger.resolve_time(as_of)

    def get_vault_report(self, vault_address: str, as_of=None) -> VaultReport:
        as_of_ms = self._as_of(as_of)
        vault = self.ledger.get_vault(vault_address)

        schedules = [
            ScheduleReport(
                id=s.id,
                state=calculator.schedule_state(s, as_of_ms),
                top_up_amount=s.top_up_amount,
                vested_amount=calculator.vested_amount(s, as_of_ms),
                withdrawable_amount=calculator.withdrawable_amount(s, as_of_ms),
                amount_withdrawn=s.amount_withdrawn,
                cliff_duration=s.cliff_duration,
                vesting_duration=s.vesting_duration,
                vesting_start=s.vesting_start,
                vesting_end=s.vesting_end,
                transaction_hash=s.transaction_hash,
                block_number=s.block_number,
            )
            for s in fifo_order(vault.sub_schedules)
        ]

        return VaultReport(
            vault_address=vault.address,
            token_address=vault.token_address,
            owner_address=vault.owner_address,
            name=vault.name,
            total_amount=vault.total_amount,
            total_top_ups=len(schedules),
            summary=calculator.vault_summary(vault, as_of_ms),
            sub_schedules=schedules,
            beneficiaries=vault.beneficiaries,
        )

    def get_total_value_locked(self, as_of=None, token_address: Optional[str] = None) -> TVLReport:
        as_of_ms = self._as_of(as_of)
        per_token: dict = {}
        active = 0

        for address in self.ledger.list_vaults():
            vault = self.ledger.get_vault(address)
            if token_address is not None and vault.token_address != token_address:
                continue

            locked = sub(vault.total_amount, total(s.amount_withdrawn for s in vault.sub_schedules))
            if locked <= 0:
                continue

            active += 1
            per_token[vault.token_address] = add(per_token.get(vault.token_address, ZERO), locked)

        return TVLReport(
            total_value_locked=total(per_token.values()),
            active_vaults_count=active,
            per_token=per_token,
            as_of=as_of_ms,
        )
