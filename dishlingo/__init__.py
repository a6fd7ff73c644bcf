"""Dishlingo: restaurant menu photos -> explained, enriched dish lists."""
