"""Entry point for 'python -m contentbase' command."""

from contentbase.cli import main

if __name__ == "__main__":
    main()
