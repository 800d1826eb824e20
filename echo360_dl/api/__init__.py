"""
HTTP Layer.

This package holds the authenticated channel used for every request made
against the Echo360 content servers.
"""

from .channel import AuthenticatedChannel

__all__ = ["AuthenticatedChannel"]
