"""
Cross‑cutting infrastructure: configuration, logging, database access,
roles, errors and authentication.
"""
