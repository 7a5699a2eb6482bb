"""API middleware package."""

from src.tweetdesk.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
