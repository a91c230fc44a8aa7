"""Core helpers shared across trmnotes modules."""
