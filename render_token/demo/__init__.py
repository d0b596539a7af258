"""Demo consumers of render tokens."""

from .server import RenderEndpoint

__all__ = ["RenderEndpoint"]
