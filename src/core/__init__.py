"""
Core utilities shared across the detector.
"""

from .logger import level_from_env, setup_logging

__all__ = ["level_from_env", "setup_logging"]
