"""minpath - best-first minimum-cost search over implicit state graphs."""

__version__ = "0.1.0"
