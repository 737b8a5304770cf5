"""HTTP service exposing schema checks."""

from .main import create_app, run

__all__ = ["create_app", "run"]
