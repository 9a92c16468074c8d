"""
VestingLedger: the facade the ingestion and API collaborators talk to.

Every mutation of a vault runs as an optimistic transaction on the vault
hash: WATCH it, read the snapshot, compute, then MULTI/EXEC the writes
together with a version bump. A concurrent writer on the same vault makes
EXEC fail with WatchError and the whole read-compute-write starts over from
a fresh snapshot. Vaults never share keys, so they never contend.

Audit records and log lines are emitted only after EXEC succeeded.
"""

import dataclasses
import logging
import uuid
from typing import Callable, Optional

import redis

from Vesting_Ledger.vl_shared import config, errors
from Vesting_Ledger.vl_shared.amount import ZERO, add, parse_amount, sub
from Vesting_Ledger.vl_shared.audit import AuditSink, log_audit_sink, make_record
from Vesting_Ledger.vl_shared.timestamps import now_ms, parse_timestamp
from Vesting_Ledger.vl_shared.types import SubSchedule, Vault, VaultSummary, WithdrawalResult
from Vesting_Ledger.vl_engine import calculator, distributor
from Vesting_Ledger.vl_db.store import LedgerStore, new_beneficiary

logger = logging.getLogger(__name__)


class VestingLedger:
    def __init__(
        self,
        client: redis.Redis,
        clock: Optional[Callable[[], int]] = None,
        audit_sink: Optional[AuditSink] = None,
        actor: str = config.DEFAULT_ACTOR,
    ):
        self.db: redis.Redis = client
        self.store = LedgerStore(client)
        self._clock = clock or now_ms
        self._audit = audit_sink or log_audit_sink
        self.actor = actor

    def _now(self) -> int:
        return int(self._clock())

    def resolve_time(self, value) -> int:
        if value is None:
            return self._now()
        return parse_timestamp(value)

    def _validate_duration(self, field: str, value) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise errors.InvalidDurationError(field, value)

    def _require(self, vault: Optional[Vault], vault_address: str) -> Vault:
        if vault is None:
            raise errors.VaultNotFoundError(vault_address)
        return vault

    def _emit(self, action: str, vault_address: str, amount, timestamp: int) -> None:
        self._audit(make_record(self.actor, action, vault_address, amount, timestamp))

    def _run_optimistic(self, vault_address: str, operation: str, body):
        """Run ``body(pipe, vault)`` under WATCH on the vault hash.

        ``body`` must call ``pipe.multi()`` before buffering its writes.
        Its return value is handed back once EXEC goes through.
        """
        vkey = self.store.vault_key(vault_address)
        try:
            for attempt in range(config.LEDGER_OPTIMISTIC_LOCK_RETRIES):
                with self.db.pipeline(transaction=True) as pipe:
                    try:
                        pipe.watch(vkey)
                        result = body(pipe, self.store.load(pipe, vault_address))
                        pipe.execute()
                        return result
                    except redis.WatchError:
                        logger.warning(
                            "%s on vault %s lost optimistic lock (attempt %d/%d), retrying",
                            operation, vault_address, attempt + 1, config.LEDGER_OPTIMISTIC_LOCK_RETRIES,
                        )
                        continue

            raise errors.ConcurrentModificationError(vault_address, operation)
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError(operation)

    # ─── Vault Management ───

    def create_vault(
        self,
        address: str,
        token_address: str,
        owner_address: str,
        name: Optional[str] = None,
        beneficiaries: Optional[dict] = None,
    ) -> Vault:
        created_at = self._now()
        initial = [
            new_beneficiary(bene_address, parse_amount(allocation, allow_zero=True))
            for bene_address, allocation in (beneficiaries or {}).items()
        ]

        def body(pipe, existing):
            if existing is not None:
                raise errors.DuplicateVaultError(address)

            vault = Vault(
                address=address,
                token_address=token_address,
                owner_address=owner_address,
                name=name or "",
                total_amount=ZERO,
                created_at=created_at,
                version=0,
                beneficiaries=sorted(initial, key=lambda b: b.address),
            )
            pipe.multi()
            self.store.write_new_vault(pipe, vault)
            return vault

        vault = self._run_optimistic(address, "create_vault", body)
        logger.info("Vault %s created for token %s (owner %s)", address, token_address, owner_address)
        self._emit(config.ACTION_CREATE_VAULT, address, ZERO, created_at)
        return vault

    def get_vault(self, vault_address: str) -> Vault:
        """Consistent snapshot of a vault with its sub-schedules and beneficiaries."""

        def body(pipe, vault):
            vault = self._require(vault, vault_address)
            # EXEC only succeeds if nothing touched the vault while we read it
            pipe.multi()
            pipe.hget(self.store.vault_key(vault_address), "version")
            return vault

        vault = self._run_optimistic(vault_address, "get_vault", body)
        logger.debug("Snapshot of vault %s at version %d", vault_address, vault.version)
        return vault

    def list_vaults(self) -> list[str]:
        return self.store.list_addresses()

    # ─── Top-ups ───

    def apply_top_up(
        self,
        vault_address: str,
        amount,
        cliff_duration: Optional[int],
        vesting_duration: int,
        transaction_hash: str,
        block_number: int,
        timestamp=None,
    ) -> SubSchedule:
        top_up_amount = parse_amount(amount)
        self._validate_duration("vesting_duration", vesting_duration)
        if cliff_duration is not None:
            self._validate_duration("cliff_duration", cliff_duration)
        top_up_timestamp = self.resolve_time(timestamp)

        def body(pipe, vault):
            vault = self._require(vault, vault_address)
            if self.store.has_transaction(pipe, vault_address, transaction_hash):
                raise errors.DuplicateTransactionError(vault_address, transaction_hash)

            schedule = SubSchedule(
                id=uuid.uuid4().hex,
                vault_address=vault_address,
                top_up_amount=top_up_amount,
                cliff_duration=cliff_duration,
                vesting_duration=vesting_duration,
                top_up_timestamp=top_up_timestamp,
                vesting_start=top_up_timestamp + (cliff_duration or 0) * 1000,
                amount_withdrawn=ZERO,
                transaction_hash=transaction_hash,
                block_number=block_number,
                created_at=self._now(),
                sequence=len(vault.sub_schedules) + 1,
            )
            pipe.multi()
            self.store.write_top_up(pipe, vault, schedule)
            return schedule

        schedule = self._run_optimistic(vault_address, "apply_top_up", body)
        logger.info(
            "Top-up %s on vault %s: amount=%s cliff=%s vesting=%ss tx=%s",
            schedule.id, vault_address, top_up_amount, cliff_duration, vesting_duration, transaction_hash,
        )
        self._emit(config.ACTION_TOP_UP, vault_address, top_up_amount, schedule.created_at)
        return schedule

    # ─── Withdrawals ───

    def quote_withdrawable(self, vault_address: str, as_of=None) -> VaultSummary:
        as_of_ms = self.resolve_time(as_of)
        return calculator.vault_summary(self.get_vault(vault_address), as_of_ms)

    def execute_withdrawal(
        self,
        vault_address: str,
        amount,
        as_of=None,
        beneficiary_address: Optional[str] = None,
    ) -> WithdrawalResult:
        requested = parse_amount(amount)
        as_of_ms = self.resolve_time(as_of)

        def body(pipe, vault):
            vault = self._require(vault, vault_address)

            beneficiary = None
            if beneficiary_address is not None:
                beneficiary = next((b for b in vault.beneficiaries if b.address == beneficiary_address), None)
                if beneficiary is None:
                    raise errors.BeneficiaryNotFoundError(vault_address, beneficiary_address)
                beneficiary = dataclasses.replace(
                    beneficiary, total_withdrawn=add(beneficiary.total_withdrawn, requested)
                )

            available = calculator.vault_summary(vault, as_of_ms).total_withdrawable
            allocations = distributor.allocate(vault.sub_schedules, requested, as_of_ms, vault_address)
            updated = distributor.apply(allocations, vault.sub_schedules, as_of_ms)

            pipe.multi()
            self.store.write_withdrawal(pipe, vault, updated, beneficiary)
            return WithdrawalResult(
                vault_address=vault_address,
                as_of=as_of_ms,
                amount_withdrawn=requested,
                distribution=allocations,
                remaining_withdrawable=sub(available, requested),
            )

        try:
            result = self._run_optimistic(vault_address, "execute_withdrawal", body)
        except errors.InsufficientVestedError as e:
            logger.warning("Withdrawal rejected on vault %s: requested %s, available %s",
                           vault_address, e.requested, e.available)
            raise

        logger.info(
            "Withdrawal of %s from vault %s across %d sub-schedule(s)",
            requested, vault_address, len(result.distribution),
        )
        self._emit(config.ACTION_WITHDRAW, vault_address, requested, as_of_ms)
        return result
