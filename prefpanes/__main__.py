"""Allow ``python -m prefpanes``."""

from prefpanes.cli.commands import app

if __name__ == "__main__":
    app()
