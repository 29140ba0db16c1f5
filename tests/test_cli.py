"""Tests for the solsend command line."""
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from solsend.cli import EXIT_FAILURE, EXIT_INDETERMINATE, cli
from solsend.errors import NetworkError, RejectedByChain, TransactionTimeout

from .fakes import RECEIVER, TEST_SECRET_KEY, FakeChainClient


def _config(receiver=str(RECEIVER), amount=1_000_000_000):
    return f"""
[network]
rpc_url = "http://localhost:8899"

[keys]
sender_private_key = "{TEST_SECRET_KEY}"
receiver_public_key = "{receiver}"

[transaction]
amount = {amount}
min_balance = 5000000
"""


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("solsend.cli.configure_logging"):
        yield


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(_config())
    return path


@pytest.fixture
def chain(keypair):
    chain = FakeChainClient({keypair.pubkey(): 10_000_000_000})
    with patch("solsend.cli.SolanaChainClient.from_settings", return_value=chain):
        yield chain


def test_send_success(runner, config_file, chain, keypair):
    result = runner.invoke(cli, ["send", "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    signature = chain.submissions[0]["signed"].signature
    assert f"Transaction succeeded: {signature}" in result.output
    assert f"Sender address: {keypair.pubkey()}" in result.output
    assert f"Receiver address: {RECEIVER}" in result.output
    assert "Current balance: 10 SOL" in result.output
    assert "Balance after transfer: 8.999995 SOL" in result.output


def test_send_preflight_flag(runner, config_file, chain):
    result = runner.invoke(cli, ["send", "--config", str(config_file), "--preflight"])

    assert result.exit_code == 0, result.output
    assert chain.submissions[0]["skip_preflight"] is False


def test_send_insufficient_balance(runner, config_file, chain, keypair):
    chain.balances[keypair.pubkey()] = 1_000_000_000

    result = runner.invoke(cli, ["send", "--config", str(config_file)])

    assert result.exit_code == EXIT_FAILURE
    assert "Error [insufficient_balance]" in result.output
    assert chain.submissions == []


def test_send_rejected(runner, config_file, chain):
    chain.submit_error = RejectedByChain("Blockhash not found")

    result = runner.invoke(cli, ["send", "--config", str(config_file)])

    assert result.exit_code == EXIT_FAILURE
    assert "Error [rejected_by_chain]" in result.output


def test_send_timeout_is_indeterminate(runner, config_file, chain):
    chain.submit_error = TransactionTimeout("not confirmed", signature="abc123")

    result = runner.invoke(cli, ["send", "--config", str(config_file)])

    assert result.exit_code == EXIT_INDETERMINATE
    assert "abc123" in result.output
    assert "Error [timeout]" in result.output


def test_send_network_error(runner, config_file, chain):
    chain.balance_error = NetworkError("connection refused")

    result = runner.invoke(cli, ["send", "--config", str(config_file)])

    assert result.exit_code == EXIT_FAILURE
    assert "Error [network_error]" in result.output
    assert "Traceback" not in result.output


def test_send_invalid_receiver(runner, tmp_path, chain):
    path = tmp_path / "config.toml"
    path.write_text(_config(receiver="not-an-address"))

    result = runner.invoke(cli, ["send", "--config", str(path)])

    assert result.exit_code == EXIT_FAILURE
    assert "Error [invalid_address]" in result.output
    assert result.output.count("not-an-address") == 1
    assert chain.balance_calls == 0


def test_send_missing_config(runner, tmp_path):
    result = runner.invoke(cli, ["send", "--config", str(tmp_path / "missing.toml")])

    assert result.exit_code == EXIT_FAILURE
    assert "Error [configuration_error]" in result.output


def test_balance(runner, config_file, chain, keypair):
    result = runner.invoke(cli, ["balance", "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    assert f"Address: {keypair.pubkey()}" in result.output
    assert "Balance: 10 SOL (10000000000 lamports)" in result.output
    assert chain.submissions == []


def test_send_network_error_reported_once(runner, config_file, chain):
    chain.balance_error = NetworkError("connection refused")

    result = runner.invoke(cli, ["send", "--config", str(config_file)])

    assert result.exit_code == EXIT_FAILURE
    assert result.output.count("connection refused") == 1
