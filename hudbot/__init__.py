"""hudbot: a game bot that plays by reading the HUD."""

__version__ = "0.1.0"
