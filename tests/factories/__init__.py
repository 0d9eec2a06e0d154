"""Test factories."""

from tests.factories.activities import ActivityFactory

__all__ = ["ActivityFactory"]
