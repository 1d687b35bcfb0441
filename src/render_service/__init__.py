"""
Template Render Service package.

This module provides a FastAPI application that fills RMGC tokens in an
office document template, converts it to PDF and publishes the result to
object storage. The ASGI app lives in `render_service.webapi`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
