"""
Entry point for ``python -m availability_engine``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
