"""Entry point for running dailyvoice as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the dailyvoice CLI application."""
    app()


if __name__ == "__main__":
    main()
