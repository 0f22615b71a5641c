"""
plugworks Core - Lifecycle primitives shared by the registry.

This module contains:
- Stages: the three-stage lifecycle machine and its gates
- Extension points: named item collections with read-time transforms
"""

__all__ = []
