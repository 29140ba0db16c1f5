"""
Transfer orchestration.

A transfer runs strictly in order: balance check, recency anchor fetch,
build and sign, submit. Each step gates the next and the whole run is a
single attempt; retrying is left to the operator.
"""
import structlog
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .chain import ChainClient
from .config import Commitment
from .constants import DEFAULT_CONFIRMATION_TIMEOUT, U64_MAX
from .errors import InsufficientBalance, InvalidAddress, TransferError
from .transaction import (
    SubmissionResult,
    TransferRequest,
    TransferState,
    lamports_to_sol,
    sign_transfer,
)

logger = structlog.get_logger()


def check_sufficient_balance(client: ChainClient, source: Pubkey, amount: int,
                             min_reserve: int) -> bool:
    """
    Return True iff the live balance of ``source`` covers ``amount + min_reserve``.

    This is a point-in-time read, not a reservation. A requirement that
    does not fit in a u64 can never be met and is reported insufficient.
    """
    return has_sufficient_balance(client.get_balance(source), amount, min_reserve)


def has_sufficient_balance(balance: int, amount: int, min_reserve: int) -> bool:
    required = amount + min_reserve
    if required > U64_MAX:
        return False
    return balance >= required


class TransferOrchestrator:
    """Runs one native transfer per call. Holds submission policy only."""

    def __init__(self, commitment: Commitment = Commitment.CONFIRMED,
                 skip_preflight: bool = True,
                 confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT):
        self.commitment = commitment
        self.skip_preflight = skip_preflight
        self.confirmation_timeout = confirmation_timeout

    @classmethod
    def from_settings(cls, settings, skip_preflight=None) -> "TransferOrchestrator":
        if skip_preflight is None:
            skip_preflight = settings.transaction.skip_preflight
        return cls(
            commitment=settings.transaction.commitment,
            skip_preflight=skip_preflight,
            confirmation_timeout=settings.transaction.confirmation_timeout,
        )

    def execute_transfer(self, client: ChainClient, request: TransferRequest,
                         keypair: Keypair) -> SubmissionResult:
        """
        Check balance, sign and submit a transfer.

        Args:
            client: Chain client used for every network call
            request: What to send and how much to keep
            keypair: Signing keypair; the source account is derived from it

        Returns:
            SubmissionResult with the signature on success. Failures are
            returned, not raised; a confirmation timeout is reported as
            indeterminate because the transaction may still land.
        """
        state = TransferState.IDLE
        source = keypair.pubkey()
        log = logger.bind(source=str(source), destination=str(request.destination),
                          amount=request.amount)

        try:
            if request.source is not None and request.source != source:
                raise InvalidAddress(
                    f"Source {request.source} does not match signing key {source}"
                )

            current = client.get_balance(source)
            log.info("balance_checked", balance=current,
                     balance_sol=str(lamports_to_sol(current)))
            if not has_sufficient_balance(current, request.amount, request.min_reserve):
                raise InsufficientBalance(current=current, required=request.required)
            state = TransferState.BALANCE_CHECKED

            anchor = client.get_recency_anchor()
            signed = sign_transfer(keypair, request.destination, request.amount, anchor)
            state = TransferState.TRANSACTION_SIGNED
            log.info("transfer_signed", signature=signed.signature,
                     blockhash=str(anchor.blockhash))

            signature = client.submit_and_confirm(
                signed,
                self.commitment,
                skip_preflight=self.skip_preflight,
                timeout=self.confirmation_timeout,
            )
        except TransferError as e:
            return self._failed(log, e, state)

        log.info("transfer_confirmed", signature=signature, commitment=self.commitment.value)
        return SubmissionResult.success(signature)

    def _failed(self, log, error: TransferError, state: TransferState) -> SubmissionResult:
        if error.indeterminate:
            # Submitted; outcome unknown
            log.warning("transfer_indeterminate", **error.to_dict())
            return SubmissionResult.failure(error, TransferState.SUBMITTED,
                                            signature=getattr(error, "signature", None))
        log.error("transfer_failed", state=state.value, **error.to_dict())
        return SubmissionResult.failure(error, TransferState.FAILED)
