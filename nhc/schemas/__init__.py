"""
NHC Schemas.

Pydantic models for request validation.
"""

from nhc.schemas.auth import *
from nhc.schemas.user import *
from nhc.schemas.organization import *
from nhc.schemas.registration import *
from nhc.schemas.content import *
from nhc.schemas.campaign import *
