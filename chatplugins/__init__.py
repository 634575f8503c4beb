"""Logic for group-chat bot games, fortunes, sign-ins, trackers and lookup tables."""

__version__ = "0.1.0"