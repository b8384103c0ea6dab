"""
allowlist-merkle - build allowlist roots and proof documents.

Usage
-----
# Hash every address, build the tree, write proofs.json, print the root
allowlist-merkle build addresses.txt --out proofs.json

# Root only
allowlist-merkle root addresses.txt

# Check a distributed entry
allowlist-merkle verify proofs.json 0x5B38Da6a701c568545dCfcB03FcB875f56beddC4

Address files hold a JSON array, comma-separated values, or one address
per line. Defaults come from ALLOWLIST_* environment variables.
"""
import logging
from pathlib import Path
from typing import Optional

import typer

from .bundle import ProofDocument, create_proof_document, read_addresses
from .config import get_settings
from .crypto import to_hex
from .errors import EmptyInputError
from .merkle import AllowlistTree

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="allowlist-merkle",
    help="Merkle allowlist roots and membership proofs",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_tree(addresses_file: Path, sort: Optional[bool]) -> AllowlistTree:
    if sort is None:
        sort = get_settings().sort_identities
    try:
        addresses = read_addresses(addresses_file.read_text(encoding="utf-8"))
        return AllowlistTree.from_addresses(addresses, sort=sort)
    except EmptyInputError:
        raise typer.BadParameter(f"No addresses found in {addresses_file}")
    except ValueError as e:
        raise typer.BadParameter(f"{addresses_file}: {e}")


@app.command()
def build(
    addresses_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Proof document path"),
    sort: Optional[bool] = typer.Option(
        None, "--sort/--no-sort", help="Order leaves by address before building"
    ),
) -> None:
    """Build the tree and write proofs for every address."""
    tree = _load_tree(addresses_file, sort)
    out = out or get_settings().output_path

    document = create_proof_document(tree)
    document.save(out)
    logger.info("Wrote %d proofs to %s", len(document.entries), out)

    typer.echo(f"Merkle root: {to_hex(tree.get_root())}")
    typer.echo(f"Proofs written to {out}")


@app.command()
def root(
    addresses_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    sort: Optional[bool] = typer.Option(
        None, "--sort/--no-sort", help="Order leaves by address before building"
    ),
) -> None:
    """Print only the Merkle root."""
    tree = _load_tree(addresses_file, sort)
    typer.echo(to_hex(tree.get_root()))


@app.command()
def verify(
    proofs_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    address: str = typer.Argument(...),
) -> None:
    """Check one address's entry against the document root."""
    try:
        document = ProofDocument.load(proofs_file)
        valid = document.verify(address)
    except (ValueError, KeyError) as e:
        raise typer.BadParameter(str(e))

    if not valid:
        typer.echo(f"{address}: not eligible")
        raise typer.Exit(code=1)
    typer.echo(f"{address}: eligible under root {to_hex(document.root)}")


if __name__ == "__main__":
    app()
