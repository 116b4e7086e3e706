"""
Middleware wrapped around the request handler.

    base.py      Middleware ABC and MiddlewarePipeline
    logging.py   LoggingMiddleware (access log)
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
]
