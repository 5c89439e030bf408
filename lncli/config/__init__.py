"""Configuration module -- exports Settings and its guarded loader.

Settings are built on demand by :func:`load_settings`, never at import
time, so a bad ``LNCLI_*`` value surfaces as a
:class:`~lncli.utils.errors.ConfigurationError` the caller can report.
"""

from lncli.config.settings import Settings, default_data_path, load_settings

__all__ = ["Settings", "default_data_path", "load_settings"]
