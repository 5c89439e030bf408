"""Concrete adapters for the interfaces in ``lncli.interfaces``."""
