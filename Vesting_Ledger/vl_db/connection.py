import logging

import redis

from Vesting_Ledger.vl_shared import config, errors
from Vesting_Ledger.vl_shared.types import HealthStatus
from Vesting_Ledger.vl_db.store import LedgerStore

logger = logging.getLogger(__name__)


def create_ledger_client() -> redis.Redis:
    r = redis.Redis(
        host=config.REDIS_HOST,
        port=config.REDIS_PORT,
        db=config.REDIS_LEDGER_DB,
        decode_responses=False,
        socket_connect_timeout=config.REDIS_SOCKET_TIMEOUT,
        socket_timeout=config.REDIS_SOCKET_TIMEOUT,
    )
    try:
        r.ping()
    except redis.exceptions.ConnectionError:
        raise errors.LedgerUnavailableError(f"Cannot connect to Redis at {config.REDIS_HOST}:{config.REDIS_PORT}")
    logger.info("Connected to ledger at %s:%s db=%s", config.REDIS_HOST, config.REDIS_PORT, config.REDIS_LEDGER_DB)
    return r


def _orphaned_vaults(ledger_client, addresses) -> list[str]:
    """Registered addresses whose vault hash is gone."""
    store = LedgerStore(ledger_client)
    pipe = ledger_client.pipeline(transaction=False)
    for address in addresses:
        pipe.exists(store.vault_key(address))
    return [address for address, found in zip(addresses, pipe.execute()) if not found]


def health_check(ledger_client) -> HealthStatus:
    connected = False
    key_count = 0
    vault_count = 0
    uptime = 0.0
    registry_ok = False
    orphaned: list[str] = []

    try:
        connected = ledger_client.ping()
        key_count = ledger_client.dbsize()

        registry_type = ledger_client.type(config.VAULT_REGISTRY_KEY)
        if registry_type == b"set":
            addresses = sorted(a.decode() for a in ledger_client.smembers(config.VAULT_REGISTRY_KEY))
            vault_count = len(addresses)
            orphaned = _orphaned_vaults(ledger_client, addresses)
            registry_ok = not orphaned
        elif registry_type == b"none":
            registry_ok = True
        else:
            logger.error("Vault registry %s has type %s, expected set",
                         config.VAULT_REGISTRY_KEY, registry_type.decode())

        if orphaned:
            logger.error("Vault registry lists %d vault(s) with no record: %s", len(orphaned), orphaned)

        uptime += ledger_client.info().get('uptime_in_seconds', 0)
    except redis.exceptions.RedisError:
        logger.warning("Ledger health check failed", exc_info=True)

    return HealthStatus(
        ledger_connected=connected,
        ledger_key_count=key_count,
        vault_count=vault_count,
        uptime_seconds=uptime,
        registry_ok=registry_ok,
        orphaned_vaults=orphaned,
    )


def close(ledger_client) -> None:
    ledger_client.close()
    logger.info("Disconnected from ledger.")
