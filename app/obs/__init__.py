"""Observability package.

Request middleware, in-process metrics, structured logging and request-scoped
context for the webhook.
"""

__all__ = [
    "middleware",
    "metrics",
    "logger",
    "context",
]
