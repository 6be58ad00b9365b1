"""Platform plugins."""

from parley.platforms.base import Platform
from parley.platforms.core import CORE_PLATFORM_TYPE, CorePlatform, PlatformDescriptor, make_platform

__all__ = ["CORE_PLATFORM_TYPE", "CorePlatform", "Platform", "PlatformDescriptor", "make_platform"]
