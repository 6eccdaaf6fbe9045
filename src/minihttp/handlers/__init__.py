"""
=============================================================================
ROUTE HANDLERS
=============================================================================

A handler is any callable taking an HTTPRequest and returning an
HTTPResponse. The router fills request.path_params before calling it.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ basic.py    root(), echo(), user_agent()                            │
    │             No I/O. Echo negotiates gzip.                           │
    │                                                                     │
    │ files.py    FileHandler(directory).get / .post                      │
    │             Reads and creates files in the served directory.        │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .basic import root, echo, user_agent
from .files import FileHandler

__all__ = [
    "root",
    "echo",
    "user_agent",
    "FileHandler",
]
