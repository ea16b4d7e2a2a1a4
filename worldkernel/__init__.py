"""
World-Kernel Platform

Publish, browse, tag and fork short world-building documents.
"""

__version__ = "0.1.0"
