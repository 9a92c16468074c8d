"""
FIFO withdrawal distribution across a vault's sub-schedules.

``allocate`` is pure: it decides how much to take from each tranche, oldest
first, and either covers the full request or raises. ``apply`` turns an
allocation into updated sub-schedule records; persisting them (inside the
same optimistic-lock transaction that read the snapshot) is the store's job.
"""

import dataclasses
from typing import Optional

from Vesting_Ledger.vl_shared import errors
from Vesting_Ledger.vl_shared.amount import ZERO, add, parse_amount, sub, total
from Vesting_Ledger.vl_shared.types import Allocation, SubSchedule
from Vesting_Ledger.vl_engine.calculator import unique_schedules, vested_amount, withdrawable_amount


def fifo_order(sub_schedules) -> list[SubSchedule]:
    return sorted(unique_schedules(sub_schedules), key=lambda s: (s.created_at, s.sequence))


def eligible_schedules(sub_schedules, as_of: int) -> list[SubSchedule]:
    # tranches still in their cliff are never allocated from
    return [s for s in fifo_order(sub_schedules) if s.vesting_start <= as_of]


def allocate(sub_schedules, requested_amount, as_of: int, vault_address: Optional[str] = None) -> list[Allocation]:
    requested = parse_amount(requested_amount)
    schedules = eligible_schedules(sub_schedules, as_of)

    if vault_address is None:
        vault_address = schedules[0].vault_address if schedules else ""

    available = total(withdrawable_amount(s, as_of) for s in schedules)
    if requested > available:
        raise errors.InsufficientVestedError(vault_address, requested, available)

    allocations: list[Allocation] = []
    remaining = requested
    for schedule in schedules:
        if remaining == 0:
            break

        avail = withdrawable_amount(schedule, as_of)
        if avail <= 0:
            continue

        taken = min(remaining, avail)
        allocations.append(Allocation(sub_schedule_id=schedule.id, amount=taken))
        remaining = sub(remaining, taken)

    return allocations


def apply(allocations: list[Allocation], sub_schedules, as_of: int) -> list[SubSchedule]:
    by_id = {s.id: s for s in sub_schedules}
    updated: dict[str, SubSchedule] = {}

    for allocation in allocations:
        current = updated.get(allocation.sub_schedule_id) or by_id.get(allocation.sub_schedule_id)
        if current is None:
            raise errors.ScheduleNotFoundError(allocation.sub_schedule_id)
        if allocation.amount <= ZERO:
            raise errors.InvalidAmountError(allocation.amount)

        new_withdrawn = add(current.amount_withdrawn, allocation.amount)
        vested = vested_amount(current, as_of)
        if new_withdrawn > vested:
            raise errors.InsufficientVestedError(
                current.vault_address, allocation.amount, withdrawable_amount(current, as_of)
            )

        updated[current.id] = dataclasses.replace(current, amount_withdrawn=new_withdrawn)

    return list(updated.values())
