"""Hospitals (tenants)."""
