"""openwith: normalize platform share intents into a canonical JSON document."""

__version__ = "0.1.0"
