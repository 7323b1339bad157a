"""FridgeCheck: photograph your fridge, get recipes."""

__version__ = "0.1.0"
