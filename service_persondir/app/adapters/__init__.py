"""
Adapters for the lookup services the person directory cache wraps.
"""

from .directory_client import DirectoryClient

__all__ = ["DirectoryClient"]
