"""
Chain client interface and its Solana JSON-RPC implementation.

The orchestrator only depends on the ``ChainClient`` protocol, so tests
can substitute an in-memory double for the RPC-backed client.
"""
import time
from typing import Optional, Protocol

import httpx
import structlog
from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment as RpcCommitment
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction_status import TransactionConfirmationStatus

from .config import Commitment
from .constants import CONFIRMATION_POLL_INTERVAL, DEFAULT_REQUEST_TIMEOUT
from .errors import NetworkError, RejectedByChain, TransactionTimeout
from .transaction import RecencyAnchor, SignedTransfer

logger = structlog.get_logger()

_COMMITMENT_RANK = {
    Commitment.PROCESSED: 0,
    Commitment.CONFIRMED: 1,
    Commitment.FINALIZED: 2,
}

_STATUS_ORDER = (
    TransactionConfirmationStatus.Processed,
    TransactionConfirmationStatus.Confirmed,
    TransactionConfirmationStatus.Finalized,
)


def _status_rank(status: TransactionConfirmationStatus) -> int:
    for rank, level in enumerate(_STATUS_ORDER):
        if status == level:
            return rank
    return -1

# Transport failures that guarantee the request never reached the node
_NOT_SENT_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout)


class ChainClient(Protocol):
    """Operations the transfer workflow needs from a chain."""

    def get_balance(self, account: Pubkey) -> int:
        ...

    def get_recency_anchor(self) -> RecencyAnchor:
        ...

    def submit_and_confirm(self, signed: SignedTransfer, commitment: Commitment, *,
                           skip_preflight: bool, timeout: float) -> str:
        ...


class SolanaChainClient:
    """ChainClient backed by ``solana.rpc.api.Client``."""

    def __init__(
        self,
        rpc_url: str,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        commitment: Commitment = Commitment.CONFIRMED,
        poll_interval: float = CONFIRMATION_POLL_INTERVAL,
        client: Optional[Client] = None,
    ):
        """
        Initialize the chain client.

        Args:
            rpc_url: JSON-RPC endpoint
            request_timeout: HTTP timeout per RPC call in seconds
            commitment: Commitment used for balance and blockhash reads
            poll_interval: Seconds between signature status polls
            client: Pre-built solana-py client, mainly for tests
        """
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.poll_interval = poll_interval
        self._client = client or Client(rpc_url, timeout=request_timeout)

    @classmethod
    def from_settings(cls, settings) -> "SolanaChainClient":
        return cls(
            settings.network.rpc_url,
            request_timeout=settings.network.request_timeout,
            commitment=settings.transaction.commitment,
        )

    def get_balance(self, account: Pubkey) -> int:
        """Read the live lamport balance of ``account``."""
        try:
            resp = self._client.get_balance(account, commitment=RpcCommitment(self.commitment.value))
        except (SolanaRpcException, RPCException) as e:
            raise NetworkError(f"Failed to fetch balance for {account}: {e}") from e
        return resp.value

    def get_recency_anchor(self) -> RecencyAnchor:
        """Fetch the latest blockhash and the last block height it is valid for."""
        try:
            resp = self._client.get_latest_blockhash(commitment=RpcCommitment(self.commitment.value))
        except (SolanaRpcException, RPCException) as e:
            raise NetworkError(f"Failed to fetch latest blockhash: {e}") from e
        return RecencyAnchor(
            blockhash=resp.value.blockhash,
            last_valid_block_height=resp.value.last_valid_block_height,
        )

    def submit_and_confirm(self, signed: SignedTransfer, commitment: Commitment, *,
                           skip_preflight: bool, timeout: float) -> str:
        """
        Send a signed transfer and wait until it reaches ``commitment``.

        Returns:
            The transaction signature

        Raises:
            NetworkError: the request never reached the node
            RejectedByChain: the node refused the transaction or it failed on chain
            TransactionTimeout: no confirmation within ``timeout`` seconds, or the
                transport failed after the request may have been sent
        """
        signature = signed.transaction.signatures[0]
        opts = TxOpts(
            skip_confirmation=True,
            skip_preflight=skip_preflight,
            preflight_commitment=RpcCommitment(commitment.value),
        )

        try:
            self._client.send_transaction(signed.transaction, opts=opts)
        except RPCException as e:
            raise RejectedByChain(f"Transaction rejected: {e}") from e
        except SolanaRpcException as e:
            if isinstance(e.__cause__, _NOT_SENT_ERRORS):
                raise NetworkError(f"Failed to submit transaction: {e}") from e
            # The request may have reached the node before the transport failed
            if isinstance(e.__cause__, httpx.TimeoutException):
                message = f"Timed out submitting transaction {signature}; it may still land"
            else:
                message = (f"Lost connection submitting transaction {signature}: {e}; "
                           "it may still land")
            raise TransactionTimeout(message, signature=str(signature)) from e

        logger.info("transaction_sent", signature=str(signature), skip_preflight=skip_preflight)
        return self._wait_for_confirmation(signature, signed.anchor, commitment, timeout)

    def _wait_for_confirmation(self, signature: Signature, anchor: RecencyAnchor,
                               commitment: Commitment, timeout: float) -> str:
        target = _COMMITMENT_RANK[commitment]
        deadline = time.monotonic() + timeout

        while True:
            try:
                status = self._signature_status(signature)
                if status is None:
                    block_height = self._client.get_block_height(
                        commitment=RpcCommitment(commitment.value)
                    ).value
                    if block_height > anchor.last_valid_block_height:
                        # It may have landed between the two reads
                        status = self._signature_status(signature)
                        if status is None:
                            raise RejectedByChain(
                                f"Transaction {signature} expired: blockhash no longer valid "
                                f"at block height {block_height}"
                            )
                if status is not None:
                    if status.err is not None:
                        raise RejectedByChain(f"Transaction {signature} failed: {status.err}")
                    if (status.confirmation_status is not None
                            and _status_rank(status.confirmation_status) >= target):
                        return str(signature)
            except (SolanaRpcException, RPCException) as e:
                # Status unknown; keep polling until the deadline
                logger.warning("confirmation_poll_failed", signature=str(signature), error=str(e))

            if time.monotonic() >= deadline:
                raise TransactionTimeout(
                    f"Transaction {signature} not confirmed within {timeout}s; "
                    "check its status before retrying",
                    signature=str(signature),
                )
            time.sleep(self.poll_interval)

    def _signature_status(self, signature: Signature):
        return self._client.get_signature_statuses([signature]).value[0]
