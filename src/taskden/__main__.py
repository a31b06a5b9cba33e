"""Allow ``python -m taskden``."""

from taskden.cli.main import app

if __name__ == "__main__":
    app()
