"""Suite declarations and YAML suite loading."""

from pageperf.suites.suite import Suite
from pageperf.suites.loader import load_suite

__all__ = ["Suite", "load_suite"]
