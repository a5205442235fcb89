"""BetterDoc access control and team invites."""

__version__ = "0.1.0"
