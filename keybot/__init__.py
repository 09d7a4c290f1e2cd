"""A Discord bot that keeps a shared pool of game keys, with a database maintenance tool."""

__version__ = "1.0.0"