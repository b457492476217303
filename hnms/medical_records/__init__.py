"""Read-only medical records."""
