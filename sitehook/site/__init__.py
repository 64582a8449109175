"""Serving of the built documentation site."""

from .static import SiteHandler

__all__ = ["SiteHandler"]
