"""Appointment scheduling."""
