"""
provlock configuration.

Provides:
- Pydantic-based settings (environment variables, .env files)
- Provider declaration loading
"""

from provlock.config.loader import load_declaration, parse_declaration
from provlock.config.settings import Settings

__all__ = [
    "Settings",
    "load_declaration",
    "parse_declaration",
]
