"""solsend command line interface"""
import sys

import click

from .chain import SolanaChainClient
from .config import Settings, load_config
from .constants import DEFAULT_CONFIG_PATH
from .errors import ConfigurationError, NetworkError, TransferError
from .keypair import KeypairLoader
from .logging import configure_logging
from .orchestrator import TransferOrchestrator
from .transaction import TransferRequest, lamports_to_sol

EXIT_FAILURE = 1
EXIT_INDETERMINATE = 3


def _fail(error: Exception, code: int = EXIT_FAILURE):
    kind = getattr(error, "kind", None)
    label = kind.value if kind is not None else "configuration_error"
    click.echo(f"Error [{label}]: {error}", err=True)
    sys.exit(code)


def _load_settings(ctx: click.Context, config_path: str) -> Settings:
    try:
        settings = load_config(config_path)
    except ConfigurationError as e:
        _fail(e)
    configure_logging(ctx.obj.get("log_level") or settings.logging.level,
                      json_output=settings.logging.json_output)
    return settings


@click.group()
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"],
                                               case_sensitive=False),
              default=None, help="Override the configured log level")
@click.pass_context
def cli(ctx, log_level):
    """Send native SOL from the configured sender to the configured receiver"""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


@cli.command()
@click.option("--config", "config_path", default=DEFAULT_CONFIG_PATH, show_default=True,
              help="Path to the TOML config file")
@click.option("--skip-preflight/--preflight", default=None,
              help="Override transaction.skip_preflight from the config")
@click.pass_context
def send(ctx, config_path: str, skip_preflight):
    """Transfer the configured amount and print the transaction signature"""
    settings = _load_settings(ctx, config_path)

    try:
        keypair = KeypairLoader.load(settings.keys.sender_private_key.get_secret_value())
        request = TransferRequest.from_settings(settings)
    except TransferError as e:
        _fail(e)

    client = SolanaChainClient.from_settings(settings)
    sender = keypair.pubkey()
    click.echo(f"Sender address: {sender}")
    click.echo(f"Receiver address: {request.destination}")

    try:
        current = client.get_balance(sender)
    except NetworkError as e:
        _fail(e)
    click.echo(f"Current balance: {lamports_to_sol(current)} SOL")

    orchestrator = TransferOrchestrator.from_settings(settings, skip_preflight=skip_preflight)
    result = orchestrator.execute_transfer(client, request, keypair)

    if result.ok:
        click.echo(f"Transaction succeeded: {result.signature}")
        try:
            new_balance = client.get_balance(sender)
        except NetworkError as e:
            # Transfer already confirmed; only the report is missing
            click.echo(f"Warning: could not read balance after transfer: {e}", err=True)
        else:
            click.echo(f"Balance after transfer: {lamports_to_sol(new_balance)} SOL")
        return

    if result.indeterminate:
        click.echo(
            f"Transaction {result.signature} was submitted but not confirmed in time. "
            "Check its status or the sender balance before retrying.",
            err=True,
        )
        _fail(result.error, code=EXIT_INDETERMINATE)

    _fail(result.error)


@cli.command()
@click.option("--config", "config_path", default=DEFAULT_CONFIG_PATH, show_default=True,
              help="Path to the TOML config file")
@click.pass_context
def balance(ctx, config_path: str):
    """Show the sender address and its current balance"""
    settings = _load_settings(ctx, config_path)

    try:
        keypair = KeypairLoader.load(settings.keys.sender_private_key.get_secret_value())
        lamports = SolanaChainClient.from_settings(settings).get_balance(keypair.pubkey())
    except TransferError as e:
        _fail(e)

    click.echo(f"Address: {keypair.pubkey()}")
    click.echo(f"Balance: {lamports_to_sol(lamports)} SOL ({lamports} lamports)")

