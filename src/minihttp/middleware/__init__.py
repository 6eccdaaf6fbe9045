"""
=============================================================================
MIDDLEWARE
=============================================================================

Cross-cutting request/response processing around the router
(Chain of Responsibility):

    LoggingMiddleware ──► router.handle ──► handler
           ▲                                   │
           └────────────── response ◄──────────┘

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
