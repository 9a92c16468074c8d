class VestingLedgerError(Exception):
    pass

class LedgerUnavailableError(VestingLedgerError):
    def __init__(self , message):
        message = f"Ledger_error  = {message}"
        super().__init__(message)

class VaultNotFoundError(VestingLedgerError):
    def __init__(self , vault_address):
        self.vault_address = vault_address
        message = f"Vault {vault_address} not found"
        super().__init__(message)

class DuplicateVaultError(VestingLedgerError):
    def __init__(self , vault_address):
        self.vault_address = vault_address
        message = f"Vault {vault_address} already exists"
        super().__init__(message)

class DuplicateTransactionError(VestingLedgerError):
    def __init__(self , vault_address , transaction_hash):
        self.vault_address = vault_address
        self.transaction_hash = transaction_hash
        message = f"Transaction {transaction_hash} already applied to vault {vault_address}"
        super().__init__(message)


class InvalidAmountError(VestingLedgerError):
    def __init__(self , amount , reason="must be a positive decimal"):
        self.amount = amount
        self.reason = reason
        message = f"Invalid amount {amount!r}: {reason}"
        super().__init__(message)


class InvalidDurationError(VestingLedgerError):
    def __init__(self , field , value):
        self.field = field
        self.value = value
        message = f"Invalid {field} {value!r}: must be a non-negative number of seconds"
        super().__init__(message)


class InvalidTimestampError(VestingLedgerError):
    def __init__(self , value):
        self.value = value
        message = f"Invalid timestamp {value!r}"
        super().__init__(message)


class InsufficientVestedError(VestingLedgerError):
    def __init__(self, vault_address, requested, available):
        self.vault_address = vault_address
        self.requested = requested
        self.available = available
        message = f"Insufficient vested amount for {vault_address}: requested {requested}, available {available}"
        super().__init__(message)


class ScheduleNotFoundError(VestingLedgerError):
    def __init__(self , schedule_id):
        self.schedule_id = schedule_id
        message = f"Sub-schedule {schedule_id} not found"
        super().__init__(message)


class ConcurrentModificationError(VestingLedgerError):
    def __init__(self, vault_address, operation):
        self.vault_address = vault_address
        self.operation = operation
        message = f"Optimistic lock failed after max retries: {operation} on {vault_address}"
        super().__init__(message)


class BeneficiaryNotFoundError(VestingLedgerError):
    def __init__(self , vault_address , beneficiary_address):
        self.vault_address = vault_address
        self.beneficiary_address = beneficiary_address
        message = f"Beneficiary {beneficiary_address} not registered on vault {vault_address}"
        super().__init__(message)
