import os

# Redis Connection

REDIS_HOST              = os.environ.get("VL_REDIS_HOST", "localhost")
REDIS_PORT              = int(os.environ.get("VL_REDIS_PORT", "6379"))
REDIS_LEDGER_DB         = int(os.environ.get("VL_REDIS_DB", "2"))     # Logical DB for the vesting ledger
REDIS_SOCKET_TIMEOUT    = 5          # seconds

# Key Namespace Prefixes

VAULT_KEY_PREFIX        = "ledger:v1:vault"      # ledger:v1:vault:{vault_address}
SCHED_KEY_PREFIX        = "ledger:v1:sched"      # ledger:v1:sched:{vault_address}:{schedule_id}
SCHED_IDX_PREFIX        = "ledger:v1:idx"        # ledger:v1:idx:{vault_address}
TX_SET_PREFIX           = "ledger:v1:tx"         # ledger:v1:tx:{vault_address}
BENE_KEY_PREFIX         = "ledger:v1:bene"       # ledger:v1:bene:{vault_address}
VAULT_REGISTRY_KEY      = "ledger:v1:vaults"

# Amount Precision (DECIMAL(36, 18))

AMOUNT_DECIMALS         = 18
AMOUNT_INTEGER_DIGITS   = 36
AMOUNT_CONTEXT_PRECISION = 80       # digits carried through multiply-then-divide

# Ledger Settings

LEDGER_OPTIMISTIC_LOCK_RETRIES = 5
DEFAULT_ACTOR           = "system"

# Audit Actions

ACTION_CREATE_VAULT     = "CREATE_VAULT"
ACTION_TOP_UP           = "TOP_UP"
ACTION_WITHDRAW         = "WITHDRAW"

# Valid Enums (for validation)

VALID_SCHEDULE_STATES   = {"PENDING", "VESTING", "FULLY_VESTED"}
VALID_AUDIT_ACTIONS     = {ACTION_CREATE_VAULT, ACTION_TOP_UP, ACTION_WITHDRAW}
