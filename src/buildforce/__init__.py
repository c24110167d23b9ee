"""Buildforce - project memory scaffolding, codebase analysis and planning sessions."""

__version__ = "0.1.0"
