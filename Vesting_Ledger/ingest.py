"""
Boundary between chain-event / API payloads and the VestingLedger.

Inbound payloads carry amounts as decimal strings and timestamps as
ISO-8601; they are parsed exactly once here and handed to the ledger as
typed values. Outbound dicts carry amounts back as decimal strings so no
float ever leaks across the boundary.

    Top-up event:   indexer sees a deposit on the vault contract
                    → process_top_up_event() → VestingLedger.apply_top_up()

    Release event:  indexer sees a beneficiary withdrawal
                    → process_release_event() → VestingLedger.execute_withdrawal()
"""

from Vesting_Ledger.vl_shared import errors
from Vesting_Ledger.vl_shared.amount import parse_amount, to_wire
from Vesting_Ledger.vl_shared.timestamps import parse_timestamp, to_iso
from Vesting_Ledger.vl_shared.types import SubSchedule, Vault, VaultSummary, WithdrawalResult
from Vesting_Ledger.vl_db.ledger import VestingLedger


def _first(event: dict, *names):
    for name in names:
        if event.get(name) is not None:
            return event[name]
    return None


def _optional_seconds(value):
    if value is None or value == "":
        return None
    return _seconds("cliff_duration", value)


def _seconds(field: str, value) -> int:
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise errors.InvalidDurationError(field, value)


def process_top_up_event(ledger: VestingLedger, event: dict) -> dict:
    """Apply an indexed top-up. Replayed events raise DuplicateTransactionError."""
    raw_amount = _first(event, "amount", "top_up_amount")
    if raw_amount is None:
        raise errors.InvalidAmountError(None, "missing amount")

    timestamp = event.get("timestamp")
    schedule = ledger.apply_top_up(
        vault_address=event["vault_address"],
        amount=parse_amount(raw_amount),
        cliff_duration=_optional_seconds(_first(event, "cliff_duration", "cliff_duration_seconds")),
        vesting_duration=_seconds(
            "vesting_duration", _first(event, "vesting_duration", "vesting_duration_seconds")
        ),
        transaction_hash=event["transaction_hash"],
        block_number=int(event.get("block_number", 0)),
        timestamp=parse_timestamp(timestamp) if timestamp is not None else None,
    )
    return schedule_to_wire(schedule)


def process_release_event(ledger: VestingLedger, event: dict) -> dict:
    raw_amount = _first(event, "amount", "amount_released")
    if raw_amount is None:
        raise errors.InvalidAmountError(None, "missing amount")

    timestamp = event.get("timestamp")
    result = ledger.execute_withdrawal(
        vault_address=event["vault_address"],
        amount=parse_amount(raw_amount),
        as_of=parse_timestamp(timestamp) if timestamp is not None else None,
        beneficiary_address=_first(event, "beneficiary_address", "user_address"),
    )
    return withdrawal_to_wire(result)


# ─── Wire encoders ───


def schedule_to_wire(schedule: SubSchedule) -> dict:
    cliff_end = schedule.cliff_end
    return {
        "id": schedule.id,
        "vault_address": schedule.vault_address,
        "top_up_amount": to_wire(schedule.top_up_amount),
        "cliff_duration": schedule.cliff_duration,
        "cliff_date": to_iso(cliff_end) if cliff_end is not None else None,
        "vesting_duration": schedule.vesting_duration,
        "vesting_start_date": to_iso(schedule.vesting_start),
        "vesting_end_date": to_iso(schedule.vesting_end),
        "amount_withdrawn": to_wire(schedule.amount_withdrawn),
        "transaction_hash": schedule.transaction_hash,
        "block_number": schedule.block_number,
        "created_at": to_iso(schedule.created_at),
    }


def vault_to_wire(vault: Vault) -> dict:
    return {
        "address": vault.address,
        "name": vault.name,
        "token_address": vault.token_address,
        "owner_address": vault.owner_address,
        "total_amount": to_wire(vault.total_amount),
        "created_at": to_iso(vault.created_at),
        "sub_schedules": [schedule_to_wire(s) for s in vault.sub_schedules],
        "beneficiaries": [
            {
                "address": b.address,
                "total_allocated": to_wire(b.total_allocated),
                "total_withdrawn": to_wire(b.total_withdrawn),
            }
            for b in vault.beneficiaries
        ],
    }


def summary_to_wire(summary: VaultSummary) -> dict:
    return {
        "vault_address": summary.vault_address,
        "as_of": to_iso(summary.as_of),
        "total_vested": to_wire(summary.total_vested),
        "total_withdrawable": to_wire(summary.total_withdrawable),
        "total_withdrawn": to_wire(summary.total_withdrawn),
    }


def withdrawal_to_wire(result: WithdrawalResult) -> dict:
    return {
        "vault_address": result.vault_address,
        "as_of": to_iso(result.as_of),
        "amount_withdrawn": to_wire(result.amount_withdrawn),
        "remaining_withdrawable": to_wire(result.remaining_withdrawable),
        "distribution": [
            {"sub_schedule_id": a.sub_schedule_id, "amount": to_wire(a.amount)}
            for a in result.distribution
        ],
    }
