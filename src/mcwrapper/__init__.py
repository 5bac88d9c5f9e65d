"""mcwrapper - Minecraft server supervision and backup tools.

Starts, stops and restarts a long-running server process, relays console
commands into it through a named pipe, and keeps a rotating set of
crash-consistent world backups.
"""

__version__ = "2.0.0"
__author__ = "mcwrapper maintainers"

from . import exceptions, logging

__all__ = ["exceptions", "logging"]
