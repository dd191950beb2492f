"""Small helpers shared by repositories and services."""

from .keys import escape_component, escape_glob, unescape_component

__all__ = [
    "escape_component",
    "escape_glob",
    "unescape_component",
]
