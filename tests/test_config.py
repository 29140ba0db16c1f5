"""Tests for configuration loading."""
import pytest

from solsend.config import Commitment, load_config
from solsend.errors import ConfigurationError

from .fakes import RECEIVER, TEST_SECRET_KEY

CONFIG = f"""
[network]
rpc_url = "http://localhost:8899"

[keys]
sender_private_key = "{TEST_SECRET_KEY}"
receiver_public_key = "{RECEIVER}"

[transaction]
amount = 1000000000
min_balance = 5000000
confirmation_timeout = 45
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SOLSEND_TRANSACTION__AMOUNT", "SOLSEND_KEYS__SENDER_PRIVATE_KEY",
                 "SOLSEND_NETWORK__RPC_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG)
    return path


def test_load_config(config_file):
    settings = load_config(config_file)

    assert settings.network.rpc_url == "http://localhost:8899"
    assert settings.network.request_timeout == 30
    assert settings.keys.sender_private_key.get_secret_value() == TEST_SECRET_KEY
    assert settings.keys.receiver_public_key == str(RECEIVER)
    assert settings.transaction.amount == 1_000_000_000
    assert settings.transaction.min_balance == 5_000_000
    assert settings.transaction.confirmation_timeout == 45
    assert settings.transaction.commitment == Commitment.CONFIRMED
    assert settings.transaction.skip_preflight is True
    assert settings.logging.level == "INFO"


def test_secret_key_is_masked(config_file):
    settings = load_config(config_file)
    assert TEST_SECRET_KEY not in repr(settings)
    assert TEST_SECRET_KEY not in str(settings.keys)


def test_environment_overrides_file(config_file, monkeypatch):
    monkeypatch.setenv("SOLSEND_TRANSACTION__AMOUNT", "42")
    monkeypatch.setenv("SOLSEND_NETWORK__RPC_URL", "http://rpc.example:8899")

    settings = load_config(config_file)

    assert settings.transaction.amount == 42
    assert settings.transaction.min_balance == 5_000_000
    assert settings.network.rpc_url == "http://rpc.example:8899"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "missing.toml")


def test_invalid_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[network\nrpc_url =")
    with pytest.raises(ConfigurationError):
        load_config(path)


@pytest.mark.parametrize("replacement", [
    "amount = 0",
    "amount = -5",
    "amount = 18446744073709551616",
])
def test_invalid_amount(tmp_path, replacement):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG.replace("amount = 1000000000", replacement))
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_unknown_commitment(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG + 'commitment = "instant"\n')
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_missing_section(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG.split("[transaction]")[0])
    with pytest.raises(ConfigurationError):
        load_config(path)


@pytest.mark.parametrize("section,line", [
    ("[transaction]", "min_balace = 5000000"),
    ("[network]", "rpc_ulr = \"http://localhost:8899\""),
    ("[keys]", "receiver = \"abc\""),
])
def test_unknown_key_is_rejected(tmp_path, section, line):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG.replace(section, f"{section}\n{line}"))
    with pytest.raises(ConfigurationError, match=line.split(" ")[0]):
        load_config(path)


def test_unknown_logging_key_is_rejected(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG + '\n[logging]\nlevl = "DEBUG"\n')
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_logging_json_flag(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG + '\n[logging]\nlevel = "DEBUG"\njson = true\n')

    settings = load_config(path)

    assert settings.logging.level == "DEBUG"
    assert settings.logging.json_output is True


def test_missing_min_balance(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG.replace("min_balance = 5000000\n", ""))
    with pytest.raises(ConfigurationError, match="min_balance"):
        load_config(path)
