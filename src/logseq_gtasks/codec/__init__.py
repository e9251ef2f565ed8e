"""Block codec and date helpers."""
