"""git-spaces: named change groups over a single git working tree."""

__version__ = "0.3.0"
