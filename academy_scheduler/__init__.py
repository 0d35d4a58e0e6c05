"""
Academy scheduler.

Weekly schedule registry, session generation and session lifecycle
management for academic groups.
"""

__version__ = "0.1.0"
