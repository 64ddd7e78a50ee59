"""openwith API package.

This module provides an optional FastAPI service layer around the share
normalizer and the resource resolver.
"""

from .server import create_app  # noqa: F401
