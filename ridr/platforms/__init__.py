from ridr.platforms.core_platform import CorePlatform

__all__ = ["CorePlatform"]
