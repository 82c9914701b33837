"""Allow running as `python -m gitspaces`."""

from gitspaces.cli.main import main

if __name__ == "__main__":
    main()
