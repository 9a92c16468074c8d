from Vesting_Ledger.vl_shared.amount import ZERO, mul_div, sub, total
from Vesting_Ledger.vl_shared.types import SubSchedule, Vault, VaultSummary


def vested_amount(schedule: SubSchedule, as_of: int):
    if as_of < schedule.vesting_start:
        return ZERO

    if schedule.vesting_duration == 0 or as_of >= schedule.vesting_end:
        return schedule.top_up_amount

    elapsed_ms = as_of - schedule.vesting_start
    duration_ms = schedule.vesting_duration * 1000
    return mul_div(schedule.top_up_amount, elapsed_ms, duration_ms)


def withdrawable_amount(schedule: SubSchedule, as_of: int):
    available = sub(vested_amount(schedule, as_of), schedule.amount_withdrawn)
    return available if available > 0 else ZERO


def schedule_state(schedule: SubSchedule, as_of: int) -> str:
    if as_of < schedule.vesting_start:
        return "PENDING"
    if schedule.vesting_duration == 0 or as_of >= schedule.vesting_end:
        return "FULLY_VESTED"
    return "VESTING"


def unique_schedules(sub_schedules) -> list[SubSchedule]:
    seen: set[str] = set()
    result: list[SubSchedule] = []
    for schedule in sub_schedules:
        if schedule.id in seen:
            continue
        seen.add(schedule.id)
        result.append(schedule)
    return result


def vault_summary(vault: Vault, as_of: int) -> VaultSummary:
    schedules = unique_schedules(vault.sub_schedules)
    return VaultSummary(
        vault_address=vault.address,
        as_of=as_of,
        total_vested=total(vested_amount(s, as_of) for s in schedules),
        total_withdrawable=total(withdrawable_amount(s, as_of) for s in schedules),
        total_withdrawn=total(s.amount_withdrawn for s in schedules),
    )
