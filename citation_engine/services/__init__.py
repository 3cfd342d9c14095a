"""Citation engine services."""
