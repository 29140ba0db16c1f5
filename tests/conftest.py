"""Shared fixtures for solsend tests."""
import pytest
from solders.keypair import Keypair

from .fakes import RECEIVER, TEST_PUBLIC_KEY, TEST_SEED, FakeChainClient


@pytest.fixture
def keypair():
    return Keypair.from_bytes(TEST_SEED + TEST_PUBLIC_KEY)


@pytest.fixture
def receiver():
    return RECEIVER


@pytest.fixture
def fake_chain(keypair):
    """Chain where the test sender holds 10 SOL."""
    return FakeChainClient({keypair.pubkey(): 10_000_000_000})
