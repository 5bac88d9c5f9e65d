"""Utility functions for mcwrapper."""

from .common import follow_file, format_command, get_system_info

__all__ = ["follow_file", "format_command", "get_system_info"]
