"""CLI for the txvault envelope-encryption engine."""
import sys
import json
from typing import Optional

import click

from txvault.core.config import get_settings
from txvault.dependencies import Vault, build_vault
from txvault.domain.envelope.errors import EnvelopeError
from txvault.domain.envelope.master_key import generate_key_hex, write_key_file
from txvault.domain.envelope.models import SecureRecord
from txvault.domain.envelope.validator import validate_record
from txvault.logging_hardening import setup_logging


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _open_vault(init_db: bool = True) -> Vault:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    try:
        return build_vault(settings, init_db=init_db)
    except (EnvelopeError, RuntimeError) as e:
        _fail(str(e))


def _load_record_file(path: str) -> SecureRecord:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        _fail(f"Cannot load record from {path}: {e}")
    try:
        return SecureRecord.from_dict(data)
    except EnvelopeError as e:
        _fail(str(e))


@click.group()
def cli():
    """txvault CLI."""
    pass


@cli.command("keygen")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the key to this file")
@click.option("--force", is_flag=True, help="Overwrite an existing key file")
def keygen(output: Optional[str], force: bool):
    """Generate a new 256-bit master key (64 hex characters)."""
    key_hex = generate_key_hex()
    if not output:
        click.echo(key_hex)
        return

    try:
        write_key_file(output, key_hex, overwrite=force)
    except FileExistsError:
        _fail(f"{output} already exists (use --force to overwrite)")
    click.echo(f"✓ Master key written to {output}")


@cli.command("encrypt")
@click.option("--party-id", required=True, help="Party identifier")
@click.option("--payload", required=True, help="JSON payload (e.g. '{\"amount\": 1000}')")
@click.option("--store/--no-store", default=False, help="Also persist the record")
def encrypt(party_id: str, payload: str, store: bool):
    """Encrypt a payload and print the SecureRecord as JSON."""
    try:
        payload_obj = json.loads(payload)
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON for payload: {e}")

    vault = _open_vault(init_db=store)
    try:
        if store:
            record = vault.service.encrypt(party_id, payload_obj)
        else:
            record = vault.codec.encode(party_id, payload_obj)
    except EnvelopeError as e:
        _fail(str(e))
    finally:
        vault.close()

    click.echo(json.dumps(record.to_dict(), indent=2))


@cli.command("decrypt")
@click.option("--file", "file_", type=click.Path(exists=True, dir_okay=False), help="SecureRecord JSON file")
@click.option("--id", "record_id", help="ID of a stored record")
def decrypt(file_: Optional[str], record_id: Optional[str]):
    """Decrypt a record from a file or from storage."""
    if bool(file_) == bool(record_id):
        _fail("Provide exactly one of --file or --id")

    vault = _open_vault()
    try:
        if file_:
            decrypted = vault.codec.decode(_load_record_file(file_))
            result = decrypted.to_dict()
        else:
            decrypted = vault.service.decrypt(record_id)
            result = {"id": record_id, **decrypted.to_dict()}
    except EnvelopeError as e:
        _fail(f"[{e.code}] {e}")
    finally:
        vault.close()

    click.echo(json.dumps(result, indent=2))


@cli.command("validate")
@click.option("--file", "file_", required=True, type=click.Path(exists=True, dir_okay=False))
def validate(file_: str):
    """Check a record's structure without decrypting it (no key needed)."""
    record = _load_record_file(file_)
    try:
        validate_record(record)
    except EnvelopeError as e:
        _fail(f"[{e.code}] {e}")
    click.echo(f"✓ Record {record.id} is well-formed")


@cli.command("list")
@click.option("--limit", default=20, type=click.IntRange(min=1), help="Maximum records to show")
@click.option("--format", "fmt", type=click.Choice(["table", "json"]), default="table")
def list_records(limit: int, fmt: str):
    """List stored records (metadata only)."""
    vault = _open_vault()
    try:
        records = vault.service.list_recent(limit)
    finally:
        vault.close()

    if fmt == "json":
        click.echo(json.dumps([r.summary() for r in records], indent=2))
        return

    if not records:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{'ID':<34} {'Party':<24} {'Created':<26}")
    click.echo("-" * 84)
    for r in records:
        click.echo(f"{r.id:<34} {r.party_id[:22]:<24} {r.created_at:<26}")


@cli.command("init-db")
def init_db():
    """Create the transactions table."""
    vault = _open_vault(init_db=True)
    vault.close()
    click.echo(f"✓ Storage initialized ({vault.settings.STORAGE_BACKEND})")


if __name__ == "__main__":
    cli()
