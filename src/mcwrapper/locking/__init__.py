"""Advisory locking so that only one mutating action runs at a time."""

from mcwrapper.exceptions import LockAlreadyTakenError

from .lock_manager import LockManager

__all__ = ["LockAlreadyTakenError", "LockManager"]
