"""fmbridge CLI entry point."""

from fmbridge.cli import app

if __name__ == "__main__":
    app()
