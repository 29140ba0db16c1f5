"""Error taxonomy for solsend.

Every failure the transfer workflow can produce is one of the
``TransferError`` subclasses below, so callers branch on ``kind``
instead of matching message strings.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Closed set of transfer failure kinds."""
    INVALID_ENCODING = "invalid_encoding"
    INVALID_KEY_LENGTH = "invalid_key_length"
    KEY_CONSTRUCTION = "key_construction_error"
    INVALID_ADDRESS = "invalid_address"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    NETWORK = "network_error"
    REJECTED_BY_CHAIN = "rejected_by_chain"
    TIMEOUT = "timeout"


class TransferError(Exception):
    """Base class for all transfer workflow errors."""

    kind: ErrorKind
    # True when the outcome on chain is unknown
    indeterminate = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "indeterminate": self.indeterminate,
        }


class InvalidEncoding(TransferError):
    """Secret key text is not valid base-58."""
    kind = ErrorKind.INVALID_ENCODING


class InvalidKeyLength(TransferError):
    """Decoded secret key has the wrong byte length."""
    kind = ErrorKind.INVALID_KEY_LENGTH

    def __init__(self, actual: int, expected: int):
        super().__init__(
            f"Invalid private key length: expected {expected} bytes, got {actual}"
        )
        self.actual = actual
        self.expected = expected


class KeyConstructionError(TransferError):
    """Decoded bytes do not form a valid keypair."""
    kind = ErrorKind.KEY_CONSTRUCTION


class InvalidAddress(TransferError):
    """Account reference could not be parsed or does not match the signer."""
    kind = ErrorKind.INVALID_ADDRESS


class InsufficientBalance(TransferError):
    """Sender cannot cover amount plus the minimum reserve."""
    kind = ErrorKind.INSUFFICIENT_BALANCE

    def __init__(self, current: int, required: int):
        super().__init__(
            f"Insufficient balance. Current balance: {current} lamports, "
            f"Required: {required} lamports"
        )
        self.current = current
        self.required = required

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(current=self.current, required=self.required)
        return data


class NetworkError(TransferError):
    """RPC endpoint unreachable or returned an unusable response."""
    kind = ErrorKind.NETWORK


class RejectedByChain(TransferError):
    """The network refused or failed the transaction."""
    kind = ErrorKind.REJECTED_BY_CHAIN


class TransactionTimeout(TransferError):
    """Confirmation did not arrive in time; the transaction may still land."""
    kind = ErrorKind.TIMEOUT
    indeterminate = True

    def __init__(self, message: str, signature: Optional[str] = None):
        super().__init__(message)
        self.signature = signature

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["signature"] = self.signature
        return data


class ConfigurationError(Exception):
    """Configuration file missing or invalid."""
    pass
