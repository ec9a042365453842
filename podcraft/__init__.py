"""Podcraft: content-to-podcast orchestration service."""

__version__ = "1.0.0"
