"""Weekly group grocery planning: roster, active recipe and scaled shopping list."""

__version__ = "0.1.0"
