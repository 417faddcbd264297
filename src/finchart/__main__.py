"""Allow ``python -m finchart``."""

from finchart.cli import app

if __name__ == "__main__":
    app()
