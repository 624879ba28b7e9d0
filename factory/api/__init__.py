"""HTTP routers for the compiler and the SOC parser."""

from factory.api.app import create_app

__all__ = ["create_app"]
