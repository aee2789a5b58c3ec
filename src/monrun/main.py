"""Entry-point for launching the monrun CLI."""
from __future__ import annotations

from .presentation.cli.app import main as cli_main


def main() -> None:
    """Run the CLI presentation layer; Ctrl+C exits quietly."""
    try:
        cli_main()
    except KeyboardInterrupt:
        print("\nGoodbye!")


if __name__ == "__main__":
    main()
