"""
Core components of crddocs.

This package contains the configuration model, error types and the
generator that ties repositories, definitions and pages together.
"""

__all__ = []
