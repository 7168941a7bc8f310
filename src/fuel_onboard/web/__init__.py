"""HTTP API for fuel-onboard."""

from .app import create_app

__all__ = ["create_app"]
