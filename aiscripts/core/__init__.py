"""
Core module: Configuration, Logging, Exceptions
"""

from aiscripts.core.config import Settings, settings

__all__ = ["Settings", "settings"]
