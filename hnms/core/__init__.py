"""Cross-cutting utilities: security, access policy, query building, pagination, middleware."""
