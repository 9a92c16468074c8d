"""
Audit records emitted by the ledger.

The ledger hands every committed mutation to an audit sink, a plain
callable taking an ``AuditRecord``. Durable storage of the trail belongs to
whoever supplies the sink; the default one only writes to the audit logger.
"""

import logging
from decimal import Decimal
from typing import Callable

from Vesting_Ledger.vl_shared import config
from Vesting_Ledger.vl_shared.amount import to_wire
from Vesting_Ledger.vl_shared.timestamps import to_iso
from Vesting_Ledger.vl_shared.types import AuditRecord

AuditSink = Callable[[AuditRecord], None]

audit_logger = logging.getLogger("Vesting_Ledger.audit")


def make_record(actor: str, action: str, vault_address: str, amount: Decimal, timestamp: int) -> AuditRecord:
    if action not in config.VALID_AUDIT_ACTIONS:
        raise ValueError(f"Unknown audit action: {action}")
    return AuditRecord(
        actor=actor,
        action=action,
        vault_address=vault_address,
        amount=amount,
        timestamp=timestamp,
    )


def format_record(record: AuditRecord) -> str:
    return f"[{to_iso(record.timestamp)}] [{record.actor}] [{record.action}] [{record.vault_address}] [{to_wire(record.amount)}]"


def log_audit_sink(record: AuditRecord) -> None:
    audit_logger.info(format_record(record))
