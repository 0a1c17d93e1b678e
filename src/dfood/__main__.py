"""Entry point for 'python -m dfood' command."""

from dfood.cli import main

if __name__ == "__main__":
    main()
