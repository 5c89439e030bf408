"""lncli -- track reading progress through serialized web fiction."""

__version__ = "0.1.0"
