"""Location Data API backend."""
