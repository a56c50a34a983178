"""Page load and interaction performance harness.

This package drives a headless browser through declared scenarios and
records timing samples for cold, warm and reset navigations as well as
in-page interaction timespans.
"""

__version__ = "0.1.0"
