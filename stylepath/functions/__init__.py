"""Functions exposed to compiled stylesheets."""

from .fs import FsFunctions

__all__ = ["FsFunctions"]
