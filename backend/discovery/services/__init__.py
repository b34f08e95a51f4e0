"""Discovery engine services."""
