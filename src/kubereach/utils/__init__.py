"""Utility functions."""

from kubereach.utils.config import Settings, load_config
from kubereach.utils.logging import setup_logging

__all__ = ["Settings", "load_config", "setup_logging"]
