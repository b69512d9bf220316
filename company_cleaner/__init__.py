"""Company page cleaner: restructure raw research pages into the standard layout."""

__version__ = "0.1.0"
