"""
Endpoint subpackage for API v1.

Each module defines an APIRouter for one domain (auth, chat, tickets,
etc.).  The routers are aggregated in ``router.py`` at the package
level and then included in the main application.
"""
