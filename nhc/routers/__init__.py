"""
NHC API Routers.

All routers are imported here for easy access.
"""

from nhc.routers.auth import router as auth_router
from nhc.routers.campaign import router as campaign_router
from nhc.routers.organizations import router as organizations_router
from nhc.routers.users import router as users_router
from nhc.routers.participants import router as participants_router
from nhc.routers.content import router as content_router
from nhc.routers.messages import router as messages_router

__all__ = [
    "auth_router",
    "campaign_router",
    "organizations_router",
    "users_router",
    "participants_router",
    "content_router",
    "messages_router",
]
