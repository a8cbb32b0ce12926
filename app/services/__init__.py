"""
Services module for calls to external collaborators.

Contains the content filtering client applied to user-submitted text.
"""

from app.services.content_filter import ContentFilter, create_http_client

__all__ = ["ContentFilter", "create_http_client"]
