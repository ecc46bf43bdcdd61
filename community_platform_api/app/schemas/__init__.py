"""
Pydantic schema definitions for API payloads.

Each domain (users, chat, tickets, events, etc.) defines its own
request and response models.  Schemas are separated from the SQL in
the service layer to decouple API representation from persistence.
"""
