"""Environment-driven settings base class."""

from common.config.base_settings import BaseAppSettings

__all__ = ["BaseAppSettings"]
