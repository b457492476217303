"""Patient records."""
