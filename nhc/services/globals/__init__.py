"""Campaign globals."""

from nhc.services.globals.globals_service import CampaignGlobals, GlobalsService, DEFAULT_GLOBALS

__all__ = [
    "CampaignGlobals",
    "GlobalsService",
    "DEFAULT_GLOBALS",
]
