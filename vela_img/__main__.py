"""Entry point for `python -m vela_img`."""

from vela_img.cli import app

if __name__ == "__main__":
    app()
