"""
Configuration management for pyCAT.

This module handles loading and saving settings shared across sessions.
"""

from .config import CatConfig, get_default_config_file

__all__ = ['CatConfig', 'get_default_config_file']
