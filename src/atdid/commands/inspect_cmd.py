"""Command: validate a single DID and show its method and identifier."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from atdid.commands._base import AtdidCommand
from atdid.domain.did import DidMethod

if TYPE_CHECKING:
    from atdid.commands._context import AppContext


@click.command(
    "inspect",
    cls=AtdidCommand,
    examples="""\
  atdid inspect did:web:localhost
  atdid inspect did:plc:z72i7hdynmk6r22z27h6tvur
  atdid --json inspect did:plc:z72i7hdynmk6r22z27h6tvur
  atdid -q inspect did:web:example.com""",
)
@click.argument("candidate")
@click.option(
    "-m",
    "--method",
    "methods",
    multiple=True,
    type=click.Choice([m.value for m in DidMethod]),
    help="Accept only these DID methods (repeatable).",
)
@click.pass_obj
def inspect_cmd(app: AppContext, candidate: str, methods: tuple[str, ...]) -> None:
    """Validate CANDIDATE and print its method and identifier."""
    svc = app.did_service()
    app.emit(svc.inspect(candidate, methods=[DidMethod(m) for m in methods] or None))
