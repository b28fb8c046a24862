"""Main entry point for the xor_tickler package."""
from xor_tickler.cli import cli


def main():
    """Main entry point function."""
    cli()


if __name__ == "__main__":
    main()
