"""Subcommand modules for atdid.

Provides register_commands() which uses deferred imports to keep
``atdid --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from atdid.commands.check import check
    from atdid.commands.inspect_cmd import inspect_cmd

    cli.add_command(check)
    cli.add_command(inspect_cmd)
