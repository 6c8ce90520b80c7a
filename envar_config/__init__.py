"""
Envar Configuration Package.

Provides Pydantic Settings for the loader and binder, read from ENVAR_* variables.
"""

from envar_config.settings import Settings

__all__ = ["Settings"]
