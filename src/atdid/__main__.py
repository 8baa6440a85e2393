"""Allow ``python -m atdid``."""

from atdid.cli import cli

if __name__ == "__main__":
    cli()
