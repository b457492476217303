"""
Hospital Network Management System API.

Multi-tenant hospital management: authentication, patient records and
appointment scheduling with per-hospital data isolation.
"""
__version__ = "1.0.0"
