"""Command line interface package."""

from .app import TasklaneCLI, main

__all__ = ["TasklaneCLI", "main"]
