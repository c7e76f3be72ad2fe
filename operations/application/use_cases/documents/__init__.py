"""Document lifecycle use cases."""
