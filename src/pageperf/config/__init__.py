"""Configuration package for the performance harness."""

from .harness_config import HarnessConfig, load_config

__all__ = ["HarnessConfig", "load_config"]
