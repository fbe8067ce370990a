"""Command line interface for AMI backups."""

from .main import main

__all__ = ["main"]
