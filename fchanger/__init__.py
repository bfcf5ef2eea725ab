"""Fchanger - batch image format conversion with optional AI renaming."""

__version__ = "0.1.0"
