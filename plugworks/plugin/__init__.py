"""
plugworks Plugin System - Plugin contract, dependency resolution and registry.

This module handles:
- The plugin capability contract and its options
- Recursive, memoized dependency resolution
- Staged registry lifecycle
"""

__all__ = []
