"""AgriBot: farm assistant chat engine (intent classification + contextual replies)."""

__version__ = "0.1.0"
