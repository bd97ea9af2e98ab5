# src/dualpin/cli.py
"""dualpin Command Line Interface.

Entry point for the dualpin CLI tool.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from pydantic import ValidationError as SettingsValidationError

from dualpin import __version__
from dualpin.contracts import (
    Backend,
    DualPinError,
    EvidenceRole,
    PutOptions,
    StoredEvidenceRecord,
)
from dualpin.core.config import DualPinSettings, load_settings

if TYPE_CHECKING:
    from dualpin.stores import HTTPGatewayStore

__all__ = ["app"]

app = typer.Typer(
    name="dualpin",
    help="dualpin: Pin evidence to Arweave and IPFS with integrity verification.",
    no_args_is_help=True,
)

audit_app = typer.Typer(help="Evidence audit trail commands.", no_args_is_help=True)
app.add_typer(audit_app, name="audit")

_SETTINGS_OPTION = typer.Option(
    None,
    "--settings",
    "-s",
    help="Path to settings YAML file (environment DUALPIN_* always applies).",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dualpin version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(False, "--no-dotenv", help="Skip loading .env file."),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # We handle existence check ourselves for better error message
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose/debug logging."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Output structured JSON logs."),
) -> None:
    """dualpin: Pin evidence to Arweave and IPFS with integrity verification."""
    from dualpin.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "WARNING")
    ctx.obj = {"log_flags": verbose or json_logs}

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho("Warning: --env-file ignored because --no-dotenv is set.", fg=typer.colors.YELLOW, err=True)


def _load_config(ctx: typer.Context, settings: str | None) -> DualPinSettings:
    """Load settings, exiting with a readable message on failure.

    Logging settings from the config apply unless --verbose/--json-logs
    were given on the command line.
    """
    from dualpin.core.logging import configure_logging

    settings_path = Path(settings).expanduser() if settings else None
    try:
        config = load_settings(settings_path)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except SettingsValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    if not (ctx.obj or {}).get("log_flags"):
        configure_logging(json_output=config.logging.json_output, level=config.logging.level)
    return config


def _fail(message: str) -> typer.Exit:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    return typer.Exit(1)


def _adapter(config: DualPinSettings, backend: Backend) -> HTTPGatewayStore:
    from dualpin.stores import ArweaveStore, IpfsStore

    if backend is Backend.ARWEAVE:
        return ArweaveStore.from_settings(config.primary)
    return IpfsStore.from_settings(config.mirror)


@app.command("hash")
def hash_file(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="File to hash."),
) -> None:
    """Print the SHA-256 digest of a file."""
    from dualpin.core.hashing import sha256_hex

    typer.echo(sha256_hex(file.read_bytes()))


@app.command()
def pin(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="File to pin."),
    content_type: str | None = typer.Option(None, "--content-type", "-t", help="MIME type of the content."),
    filename: str | None = typer.Option(None, "--filename", help="Filename hint (defaults to the file's name)."),
    expected_sha256: str | None = typer.Option(None, "--expected-sha256", help="Fail unless content hashes to this."),
    transaction_id: str | None = typer.Option(None, "--transaction-id", help="Business transaction for the audit row."),
    role: EvidenceRole | None = typer.Option(None, "--role", help="Submitting party for the audit row."),
    settings: str | None = _SETTINGS_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Pin a file to the primary and mirror backends."""
    from dualpin.engine import DualPinOrchestrator

    config = _load_config(ctx, settings)
    options = PutOptions(
        content_type=content_type,
        filename=filename or file.name,
        expected_digest=expected_sha256,
    )

    async def _run() -> dict[str, Any]:
        async with DualPinOrchestrator.from_settings(config) as pinner:
            result = await pinner.dual_pin(file.read_bytes(), options, transaction_id=transaction_id, role=role)
            return result.to_dict()

    try:
        outcome = asyncio.run(_run())
    except DualPinError as e:
        raise _fail(str(e)) from None

    if config.audit.enabled and transaction_id and role and not outcome["audit_recorded"]:
        typer.secho(
            "Warning: both copies are pinned but the evidence row was not written (see audit_failed in the logs).",
            fg=typer.colors.YELLOW,
            err=True,
        )

    if as_json:
        typer.echo(json.dumps(outcome, indent=2))
        return
    typer.echo(f"sha256:  {outcome['integrity']['computed_sha256']}")
    typer.echo(f"primary: {outcome['primary']['cid']}  {outcome['primary']['url']}")
    typer.echo(f"mirror:  {outcome['mirror']['cid']}  {outcome['mirror']['url']}")


@app.command()
def verify(
    ctx: typer.Context,
    backend: Backend = typer.Argument(..., help="Backend holding the content."),
    cid: str = typer.Argument(..., help="Identifier (Arweave tx id or IPFS CID)."),
    sha256: str = typer.Argument(..., help="Expected SHA-256 hex digest."),
    settings: str | None = _SETTINGS_OPTION,
) -> None:
    """Re-download content and check it hashes to SHA256.

    Exits 0 on match, 1 on mismatch or unreadable content.
    """
    from dualpin.core.hashing import is_sha256_hex

    if not is_sha256_hex(sha256.lower()):
        raise _fail(f"not a SHA-256 hex digest: {sha256!r}")
    config = _load_config(ctx, settings)

    async def _run() -> bool:
        async with _adapter(config, backend) as store:
            return await store.verify(cid, sha256)

    try:
        matched = asyncio.run(_run())
    except DualPinError as e:
        raise _fail(str(e)) from None

    if not matched:
        typer.secho(f"MISMATCH {backend} {cid}", fg=typer.colors.RED)
        raise typer.Exit(1)
    typer.secho(f"OK {backend} {cid}", fg=typer.colors.GREEN)


@app.command()
def probe(
    ctx: typer.Context,
    backend: Backend = typer.Argument(..., help="Backend holding the content."),
    cid: str = typer.Argument(..., help="Identifier (Arweave tx id or IPFS CID)."),
    settings: str | None = _SETTINGS_OPTION,
) -> None:
    """Show gateway metadata for an identifier without downloading it."""
    config = _load_config(ctx, settings)

    async def _run() -> Any:
        async with _adapter(config, backend) as store:
            return await store.probe(cid)

    try:
        found = asyncio.run(_run())
    except DualPinError as e:
        raise _fail(str(e)) from None

    if found is None:
        typer.echo(f"{cid}: not found on {backend} gateway")
        raise typer.Exit(1)
    typer.echo(f"content-type: {found.content_type or '-'}")
    typer.echo(f"size:         {found.size if found.size is not None else '-'}")


# === Audit subcommands ===


def _open_recorder(ctx: typer.Context, settings: str | None) -> Any:
    from dualpin.core.audit import EvidenceRecorder

    config = _load_config(ctx, settings)
    try:
        return EvidenceRecorder.from_settings(config.audit)
    except DualPinError as e:
        raise _fail(str(e)) from None


def _print_records(records: list[StoredEvidenceRecord], as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps([r.to_dict() for r in records], indent=2))
        return
    if not records:
        typer.echo("No evidence records.")
        return
    for r in records:
        typer.echo(f"{r.created_at.isoformat()}  {r.transaction_id}  {r.role:<6}  {r.sha256}  {r.primary_cid}  {r.mirror_cid}")


@audit_app.command("migrate")
def audit_migrate(ctx: typer.Context, settings: str | None = _SETTINGS_OPTION) -> None:
    """Create the evidence table and indexes if missing."""
    recorder = _open_recorder(ctx, settings)
    try:
        recorder.migrate()
    except DualPinError as e:
        raise _fail(str(e)) from None
    finally:
        recorder.close()
    typer.echo("Evidence table is up to date.")


@audit_app.command("show")
def audit_show(
    ctx: typer.Context,
    transaction_id: str = typer.Argument(..., help="Business transaction id."),
    settings: str | None = _SETTINGS_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print records as JSON."),
) -> None:
    """List evidence records for one transaction, newest first."""
    recorder = _open_recorder(ctx, settings)
    try:
        records = recorder.find_by_transaction(transaction_id)
    finally:
        recorder.close()
    _print_records(records, as_json)


@audit_app.command("recent")
def audit_recent(
    ctx: typer.Context,
    limit: int = typer.Option(50, "--limit", "-n", help="Rows to show (clamped to 1..500)."),
    settings: str | None = _SETTINGS_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print records as JSON."),
) -> None:
    """List the most recent evidence records across all transactions."""
    recorder = _open_recorder(ctx, settings)
    try:
        records = recorder.list_recent(limit)
    finally:
        recorder.close()
    _print_records(records, as_json)


if __name__ == "__main__":
    app()
