"""
Authentication module for the hospital network system.

This module provides authentication and authorization functionality including:
- User registration and login
- Profile and password management
- JWT bearer token authentication
- Role and hospital based access control dependencies
"""
