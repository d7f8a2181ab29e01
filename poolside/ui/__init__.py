"""
User interface package for the Poolside scorekeeper.

This package contains the Flask operator API.
"""
from .web_app import create_app, run_web_app

__all__ = ["create_app", "run_web_app"]
