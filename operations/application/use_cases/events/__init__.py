"""Event queue use cases and handlers."""
