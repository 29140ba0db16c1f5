"""Transfer request, transaction building and submission results."""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from .constants import LAMPORTS_PER_SOL, U64_MAX
from .errors import TransferError
from .keypair import parse_address


def lamports_to_sol(lamports: int) -> Decimal:
    """Convert lamports to SOL for display. Never feed the result back into amounts."""
    return Decimal(lamports) / Decimal(LAMPORTS_PER_SOL)


class TransferStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    INDETERMINATE = "indeterminate"  # Submitted but confirmation timed out


class TransferState(str, Enum):
    """Orchestrator states for a single transfer run."""
    IDLE = "idle"
    BALANCE_CHECKED = "balance_checked"
    TRANSACTION_SIGNED = "transaction_signed"
    SUBMITTED = "submitted"
    FAILED = "failed"


class TransferRequest(BaseModel):
    """A native transfer of ``amount`` lamports keeping ``min_reserve`` in the source."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    destination: Pubkey
    amount: int = Field(..., gt=0, le=U64_MAX)
    min_reserve: int = Field(default=0, ge=0, le=U64_MAX)
    # Optional; when set it must match the signing keypair
    source: Optional[Pubkey] = None

    @property
    def required(self) -> int:
        """Lamports the source must hold for the transfer to go ahead."""
        return self.amount + self.min_reserve

    @classmethod
    def from_settings(cls, settings) -> "TransferRequest":
        """
        Build a request from loaded settings.

        Raises:
            InvalidAddress: if the receiver address is malformed
        """
        return cls(
            destination=parse_address(settings.keys.receiver_public_key),
            amount=settings.transaction.amount,
            min_reserve=settings.transaction.min_balance,
        )


class RecencyAnchor(BaseModel):
    """Recent blockhash a transaction is bound to, with its expiry height."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    blockhash: Hash
    last_valid_block_height: int = Field(..., ge=0)


@dataclass(frozen=True)
class SignedTransfer:
    """A signed transfer transaction and the values it was built from."""
    transaction: Transaction
    source: Pubkey
    destination: Pubkey
    amount: int
    anchor: RecencyAnchor

    @property
    def signature(self) -> str:
        return str(self.transaction.signatures[0])


def build_transfer_instruction(source: Pubkey, destination: Pubkey, amount: int) -> Instruction:
    """Build the system program transfer instruction."""
    return transfer(TransferParams(from_pubkey=source, to_pubkey=destination, lamports=amount))


def sign_transfer(keypair: Keypair, destination: Pubkey, amount: int,
                  anchor: RecencyAnchor) -> SignedTransfer:
    """
    Build and sign a transfer bound to ``anchor``.

    Signing is deterministic: the same keypair, destination, amount and
    anchor always produce the same signature.
    """
    source = keypair.pubkey()
    instruction = build_transfer_instruction(source, destination, amount)
    message = Message([instruction], source)
    transaction = Transaction([keypair], message, anchor.blockhash)

    return SignedTransfer(
        transaction=transaction,
        source=source,
        destination=destination,
        amount=amount,
        anchor=anchor,
    )


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one transfer run."""
    status: TransferStatus
    state: TransferState
    signature: Optional[str] = None
    error: Optional[TransferError] = None

    @property
    def ok(self) -> bool:
        return self.status == TransferStatus.SUCCESS

    @property
    def indeterminate(self) -> bool:
        return self.status == TransferStatus.INDETERMINATE

    @classmethod
    def success(cls, signature: str) -> "SubmissionResult":
        return cls(status=TransferStatus.SUCCESS, state=TransferState.SUBMITTED,
                   signature=signature)

    @classmethod
    def failure(cls, error: TransferError, state: TransferState,
                signature: Optional[str] = None) -> "SubmissionResult":
        """Wrap ``error``; timeouts become indeterminate rather than failed."""
        status = TransferStatus.INDETERMINATE if error.indeterminate else TransferStatus.FAILED
        return cls(status=status, state=state, signature=signature, error=error)
