"""Test utilities for wallhack applications.

    from wallhack.testing import TestClient
"""

from wallhack.testing.client import TestClient

__all__ = ["TestClient"]
