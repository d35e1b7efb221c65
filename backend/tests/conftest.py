"""
Shared pytest configuration.
"""

import os

# Tests always run against the in-memory caches
os.environ["USE_REDIS"] = "false"
