# opensig/cli/main.py
"""
CLI for hashing, verifying and signing documents against a local OpenSig ledger.
"""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from opensig.chain.document import Document
from opensig.config import get_ledger_path, get_log_level, get_signer, load_configured_networks
from opensig.core.canon import signatures_json
from opensig.core.encoding import buf2hex, is_hex, strip_0x
from opensig.core.errors import BlockchainNotSupportedError, OpenSigError, TransactionError
from opensig.core.types import SignatureData, SignatureEvent
from opensig.crypto.hashing import hash_file
from opensig.network.networks import LOCAL_CHAIN_ID, list_networks
from opensig.network.sqlite import SQLiteLedger

app = typer.Typer(
    name="opensig",
    help="Sign and verify documents with private, timestamped ledger signatures",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (overrides OPENSIG_LOG_LEVEL env var)",
    ),
):
    """Sign and verify documents on an OpenSig ledger."""
    logging.basicConfig(
        level=get_log_level(log_level),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    try:
        load_configured_networks()
    except (OSError, ValueError) as e:
        console.print(f"[red]Failed to load networks: {str(e)}[/]")
        raise typer.Exit(1)


def open_ledger(ledger: Optional[Path], chain_id: int, signer: Optional[str] = None) -> SQLiteLedger:
    ledger_path = get_ledger_path(ledger)
    try:
        return SQLiteLedger(ledger_path, chain_id=chain_id, signer=get_signer(signer))
    except Exception as e:
        console.print(f"[red]Failed to open ledger: {str(e)}[/]")
        console.print("[yellow]The file may be corrupted or not a valid SQLite DB.[/]")
        raise typer.Exit(1)


def open_document(file: Optional[Path], document_hash: Optional[str], client: SQLiteLedger) -> Document:
    if (file is None) == (document_hash is None):
        console.print("[red]Give either a FILE or --hash, not both[/]")
        raise typer.Exit(1)

    if file is not None:
        if not file.is_file():
            console.print(f"[red]File not found: {file}[/]")
            raise typer.Exit(1)
        return Document.from_file(file, client)

    if not is_hex(document_hash) or len(strip_0x(document_hash)) != 64:
        console.print(f"[red]Invalid document hash: {document_hash}[/]")
        console.print("  Expected 32 bytes of hex, e.g. the output of 'opensig hash FILE'")
        raise typer.Exit(1)
    return Document.from_hash(document_hash, client)


def format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, timezone.utc).isoformat(timespec="seconds")


def format_data(data: SignatureData) -> str:
    if data.type == "none":
        return "—"
    label = f"{data.type}{', encrypted' if data.encrypted else ''}"
    if data.undecryptable:
        return f"[dim]({label}, unreadable)[/]"
    content = data.content or ""
    return f"{content[:60]}{'...' if len(content) > 60 else ''} [dim]({label})[/]"


def signature_table(events: List[SignatureEvent]) -> Table:
    table = Table(title="Signatures")
    table.add_column("#")
    table.add_column("Time (UTC)")
    table.add_column("Signatory")
    table.add_column("Signature")
    table.add_column("Data")

    for i, e in enumerate(events):
        table.add_row(str(i), format_time(e.time), e.signatory, e.signature[:18] + "...", format_data(e.data))
    return table


@app.command("hash")
def hash_command(
    file: Path = typer.Argument(..., help="File to hash"),
):
    """Print the document hash of a file."""
    if not file.is_file():
        console.print(f"[red]File not found: {file}[/]")
        raise typer.Exit(1)
    typer.echo(buf2hex(hash_file(file)))


@app.command()
def verify(
    file: Optional[Path] = typer.Argument(None, help="File to verify"),
    document_hash: Optional[str] = typer.Option(None, "--hash", help="Document hash instead of a file"),
    ledger: Optional[Path] = typer.Option(None, "--ledger", help="Ledger DB path (overrides OPENSIG_LEDGER_PATH)"),
    chain_id: int = typer.Option(LOCAL_CHAIN_ID, "--chain-id", help="Network the ledger belongs to"),
    as_json: bool = typer.Option(False, "--json", help="Print signatures as canonical JSON"),
):
    """List every signature published for a document."""
    client = open_ledger(ledger, chain_id)
    try:
        doc = open_document(file, document_hash, client)
        try:
            events = asyncio.run(doc.verify())
        except BlockchainNotSupportedError as e:
            console.print(f"[red]{str(e)}[/]")
            raise typer.Exit(1)

        if as_json:
            typer.echo(signatures_json(events, buf2hex(doc.document_hash)))
            return

        if not events:
            console.print("[yellow]No signatures found for this document.[/]")
            return

        console.print(signature_table(events))
        console.print(f"[green]{len(events)} signature(s) found[/]")
    finally:
        client.close()


@app.command()
def sign(
    file: Optional[Path] = typer.Argument(None, help="File to sign"),
    document_hash: Optional[str] = typer.Option(None, "--hash", help="Document hash instead of a file"),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Data to attach to the signature"),
    hex_data: bool = typer.Option(False, "--hex", help="Treat --data as hex bytes"),
    encrypt: bool = typer.Option(False, "--encrypt", "-e", help="Encrypt the data so only document holders can read it"),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Wait for the transaction to be confirmed"),
    ledger: Optional[Path] = typer.Option(None, "--ledger", help="Ledger DB path (overrides OPENSIG_LEDGER_PATH)"),
    chain_id: int = typer.Option(LOCAL_CHAIN_ID, "--chain-id", help="Network the ledger belongs to"),
    signer: Optional[str] = typer.Option(None, "--signer", help="Signer address (overrides OPENSIG_SIGNER)"),
):
    """Sign a document, optionally attaching (encrypted) data."""
    if data is None:
        payload = None
    elif hex_data:
        if not is_hex(data) or len(strip_0x(data)) % 2:
            console.print(f"[red]--data is not hex: {data}[/]")
            raise typer.Exit(1)
        payload = SignatureData.hex(data, encrypted=encrypt)
    else:
        payload = SignatureData.string(data, encrypted=encrypt)

    client = open_ledger(ledger, chain_id, signer)
    try:
        doc = open_document(file, document_hash, client)

        async def _sign():
            await doc.verify()
            result = await doc.sign(payload)
            if not wait:
                result.confirmation.cancel()
                return result, None
            return result, await result.confirmation

        try:
            result, receipt = asyncio.run(_sign())
        except BlockchainNotSupportedError as e:
            console.print(f"[red]{str(e)}[/]")
            raise typer.Exit(1)
        except TransactionError as e:
            console.print(f"[red]Signing failed: {str(e)}[/]")
            raise typer.Exit(1)
        except OpenSigError as e:
            console.print(f"[red]{str(e)}[/]")
            raise typer.Exit(1)

        console.print(f"[green]✓ Signed {file or document_hash}[/]")
        console.print(f"  Signature:   {result.signature}")
        console.print(f"  Signatory:   {result.signatory}")
        console.print(f"  Transaction: {result.transaction_hash}")
        if receipt is not None:
            console.print(f"  Confirmed in block {receipt.block_number}")
    finally:
        client.close()


@app.command()
def networks():
    """List networks with a known OpenSig registry contract."""
    table = Table(title="Networks")
    table.add_column("Chain ID")
    table.add_column("Name")
    table.add_column("Registry Contract")
    table.add_column("Block Time (s)")

    for n in list_networks():
        table.add_row(str(n.chain_id), n.name, n.contract_address, f"{n.block_time:g}")

    console.print(table)


if __name__ == "__main__":
    app()
