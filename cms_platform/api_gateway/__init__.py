"""
API Gateway Module

Application factory and the default ASGI application served by uvicorn.
"""

from .main import app, create_app, initialize_platform

__all__ = ["app", "create_app", "initialize_platform"]
