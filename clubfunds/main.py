"""
Name: ASGI entry point

Run with: uvicorn clubfunds.main:app
"""

from .api.main import app

__all__ = ["app"]
