"""Email templates."""
