"""
Service layer containing business logic.

Services are classes of asynchronous classmethods.  Each call opens its
own SQLite connection, runs parameterized SQL and returns pydantic
schema instances.  Failures are reported with the typed exceptions in
``core.errors``; the API layer maps them to HTTP status codes.
"""
