"""Allow running envsetup as ``python -m envsetup``."""

from envsetup.cli import app

if __name__ == "__main__":
    app()
