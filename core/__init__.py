"""
Core Components.

Pure data structures shared by infrastructure, services and triggers.

Structure:
    models/: Catalog, package and result models (no I/O)
"""

from . import models

__all__ = ['models']
