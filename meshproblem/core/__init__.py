"""
Core package.

Process-level settings shared by every layer.
"""
