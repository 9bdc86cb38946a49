"""Domain event infrastructure."""
