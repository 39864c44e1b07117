"""Main entry point for ``python -m helpform``."""

from helpform.cli.main import cli

if __name__ == "__main__":
    cli()
