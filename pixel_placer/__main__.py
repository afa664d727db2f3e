"""Entry point for running the pixel placer control server as a module."""

from __future__ import annotations

from .app import app
from .config import SETTINGS


def main() -> None:
    """Run the Flask development server."""
    app.run(host="127.0.0.1", port=SETTINGS.port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
