"""Liveness probe for the supervised process."""

import os


def is_process_alive(pid: int | None) -> bool:
    """Return whether ``pid`` names a live process we may signal.

    Sends signal 0, which performs the permission and existence checks without
    delivering anything. A missing process and a process owned by someone else
    both count as not alive.
    """
    if pid is None or pid <= 0:
        # kill(0, ...) and kill(-1, ...) address process groups, not a process.
        return False
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True
