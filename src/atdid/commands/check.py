"""Command: validate one or more DID candidates."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from atdid.commands._base import AtdidCommand
from atdid.domain.did import DidMethod

if TYPE_CHECKING:
    from atdid.commands._context import AppContext


@click.command(
    cls=AtdidCommand,
    examples="""\
  atdid check did:web:example.com did:plc:z72i7hdynmk6r22z27h6tvur
  atdid check --file dids.txt
  cat dids.txt | atdid check --file -
  atdid check --fail-fast --file dids.txt
  atdid check --method plc did:web:example.com
  atdid --json check did:key:zQ3sh""",
)
@click.argument("candidates", nargs=-1)
@click.option(
    "-f",
    "--file",
    "source",
    type=click.Path(exists=True, dir_okay=False, allow_dash=True, path_type=Path),
    default=None,
    help="Read candidates from a file, one per line ('-' for stdin).",
)
@click.option("--fail-fast", is_flag=True, help="Stop at the first invalid candidate.")
@click.option(
    "-m",
    "--method",
    "methods",
    multiple=True,
    type=click.Choice([m.value for m in DidMethod]),
    help="Accept only these DID methods (repeatable). Overrides [check] methods.",
)
@click.pass_obj
def check(
    app: AppContext,
    candidates: tuple[str, ...],
    source: Path | None,
    fail_fast: bool,
    methods: tuple[str, ...],
) -> None:
    """Check that every candidate is a valid ATProto DID."""
    from atdid.services.did import parse_candidates

    svc = app.did_service()
    pending = list(candidates)
    if source is not None and str(source) == "-":
        stdin = click.get_text_stream("stdin")
        pending.extend(parse_candidates(stdin, ignore_comments=app.settings.check.ignore_comments))
    elif source is not None:
        pending.extend(svc.read_candidates(source))

    app.emit(
        svc.check(
            pending,
            methods=[DidMethod(m) for m in methods] or None,
            fail_fast=True if fail_fast else None,
        )
    )
