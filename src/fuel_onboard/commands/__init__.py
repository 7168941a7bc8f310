"""CLI commands for fuel-onboard."""

from .calories import calories
from .init import init
from .onboard import onboard
from .profile import profile
from .serve import serve

__all__ = [
    "calories",
    "init",
    "onboard",
    "profile",
    "serve",
]
