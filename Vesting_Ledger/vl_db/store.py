import json
from typing import Optional

import redis

from Vesting_Ledger.vl_shared import config, errors
from Vesting_Ledger.vl_shared.amount import ZERO, add, load_amount, to_storage
from Vesting_Ledger.vl_shared.types import Beneficiary, SubSchedule, Vault


class LedgerStore:
    def __init__(self, client: redis.Redis):
        self.db: redis.Redis = client

    def vault_key(self, vault_address: str) -> str:
        return f"{config.VAULT_KEY_PREFIX}:{vault_address}"

    def _sched_key(self, vault_address: str, schedule_id: str) -> str:
        return f"{config.SCHED_KEY_PREFIX}:{vault_address}:{schedule_id}"

    def _idx_key(self, vault_address: str) -> str:
        return f"{config.SCHED_IDX_PREFIX}:{vault_address}"

    def _tx_key(self, vault_address: str) -> str:
        return f"{config.TX_SET_PREFIX}:{vault_address}"

    def _bene_key(self, vault_address: str) -> str:
        return f"{config.BENE_KEY_PREFIX}:{vault_address}"

    # ─── Serialization ───

    def _serialize_vault(self, vault: Vault) -> dict:
        return {
            "address": vault.address,
            "token_address": vault.token_address,
            "owner_address": vault.owner_address,
            "name": vault.name,
            "total_amount": to_storage(vault.total_amount),
            "created_at": str(vault.created_at),
            "version": str(vault.version),
            "schedule_count": str(len(vault.sub_schedules)),
        }

    def _deserialize_vault(self, data: dict[bytes, bytes]) -> Vault:
        return Vault(
            address=data[b"address"].decode(),
            token_address=data[b"token_address"].decode(),
            owner_address=data[b"owner_address"].decode(),
            name=data[b"name"].decode(),
            total_amount=load_amount(data[b"total_amount"]),
            created_at=int(data[b"created_at"]),
            version=int(data[b"version"]),
        )

    def _serialize_schedule(self, schedule: SubSchedule) -> dict:
        return {
            "id": schedule.id,
            "vault_address": schedule.vault_address,
            "top_up_amount": to_storage(schedule.top_up_amount),
            "cliff_duration": "" if schedule.cliff_duration is None else str(schedule.cliff_duration),
            "vesting_duration": str(schedule.vesting_duration),
            "top_up_timestamp": str(schedule.top_up_timestamp),
            "vesting_start": str(schedule.vesting_start),
            "amount_withdrawn": to_storage(schedule.amount_withdrawn),
            "transaction_hash": schedule.transaction_hash,
            "block_number": str(schedule.block_number),
            "created_at": str(schedule.created_at),
            "sequence": str(schedule.sequence),
        }

    def _deserialize_schedule(self, data: dict[bytes, bytes]) -> SubSchedule:
        cliff = data[b"cliff_duration"].decode()
        return SubSchedule(
            id=data[b"id"].decode(),
            vault_address=data[b"vault_address"].decode(),
            top_up_amount=load_amount(data[b"top_up_amount"]),
            cliff_duration=int(cliff) if cliff else None,
            vesting_duration=int(data[b"vesting_duration"]),
            top_up_timestamp=int(data[b"top_up_timestamp"]),
            vesting_start=int(data[b"vesting_start"]),
            amount_withdrawn=load_amount(data[b"amount_withdrawn"]),
            transaction_hash=data[b"transaction_hash"].decode(),
            block_number=int(data[b"block_number"]),
            created_at=int(data[b"created_at"]),
            sequence=int(data[b"sequence"]),
        )

    def _serialize_beneficiary(self, beneficiary: Beneficiary) -> str:
        return json.dumps({
            "total_allocated": to_storage(beneficiary.total_allocated),
            "total_withdrawn": to_storage(beneficiary.total_withdrawn),
        })

    def _deserialize_beneficiary(self, address: bytes, raw: bytes) -> Beneficiary:
        data = json.loads(raw)
        return Beneficiary(
            address=address.decode(),
            total_allocated=load_amount(data["total_allocated"]),
            total_withdrawn=load_amount(data["total_withdrawn"]),
        )

    # ─── Reads (immediate mode, call after WATCH) ───

    def load(self, pipe: redis.client.Pipeline, vault_address: str) -> Optional[Vault]:
        data = pipe.hgetall(self.vault_key(vault_address))
        if not data:
            return None

        vault = self._deserialize_vault(data)

        for schedule_id in pipe.zrange(self._idx_key(vault_address), 0, -1):
            sched = pipe.hgetall(self._sched_key(vault_address, schedule_id.decode()))
            if sched:
                vault.sub_schedules.append(self._deserialize_schedule(sched))

        benes = pipe.hgetall(self._bene_key(vault_address))
        vault.beneficiaries = sorted(
            (self._deserialize_beneficiary(addr, raw) for addr, raw in benes.items()),
            key=lambda b: b.address,
        )
        return vault

    def has_transaction(self, pipe: redis.client.Pipeline, vault_address: str, transaction_hash: str) -> bool:
        return bool(pipe.sismember(self._tx_key(vault_address), transaction_hash))

    def exists(self, vault_address: str) -> bool:
        try:
            return bool(self.db.exists(self.vault_key(vault_address)))
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("exists")

    def list_addresses(self) -> list[str]:
        try:
            return sorted(a.decode() for a in self.db.smembers(config.VAULT_REGISTRY_KEY))
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("list_addresses")

    # ─── Writes (buffered, call after MULTI) ───

    def write_new_vault(self, pipe: redis.client.Pipeline, vault: Vault) -> None:
        pipe.hset(self.vault_key(vault.address), mapping=self._serialize_vault(vault))
        pipe.sadd(config.VAULT_REGISTRY_KEY, vault.address)
        if vault.beneficiaries:
            pipe.hset(self._bene_key(vault.address), mapping={
                b.address: self._serialize_beneficiary(b) for b in vault.beneficiaries
            })

    def write_top_up(self, pipe: redis.client.Pipeline, vault: Vault, schedule: SubSchedule) -> None:
        vkey = self.vault_key(vault.address)
        pipe.hset(self._sched_key(vault.address, schedule.id), mapping=self._serialize_schedule(schedule))
        pipe.zadd(self._idx_key(vault.address), {schedule.id: schedule.sequence})
        pipe.sadd(self._tx_key(vault.address), schedule.transaction_hash)
        pipe.hset(vkey, mapping={
            "total_amount": to_storage(add(vault.total_amount, schedule.top_up_amount)),
            "schedule_count": str(schedule.sequence),
        })
        pipe.hincrby(vkey, "version", 1)

    def write_withdrawal(
        self,
        pipe: redis.client.Pipeline,
        vault: Vault,
        updated: list[SubSchedule],
        beneficiary: Optional[Beneficiary] = None,
    ) -> None:
        for schedule in updated:
            pipe.hset(
                self._sched_key(vault.address, schedule.id),
                "amount_withdrawn",
                to_storage(schedule.amount_withdrawn),
            )
        if beneficiary is not None:
            pipe.hset(self._bene_key(vault.address), beneficiary.address, self._serialize_beneficiary(beneficiary))
        pipe.hincrby(self.vault_key(vault.address), "version", 1)


def new_beneficiary(address: str, total_allocated=ZERO) -> Beneficiary:
    return Beneficiary(address=address, total_allocated=total_allocated, total_withdrawn=ZERO)
