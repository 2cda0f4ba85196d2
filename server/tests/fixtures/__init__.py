"""Shared test fixtures."""

from .backends import FailingBackend, FakeBackend, SlowBackend

__all__ = ["FakeBackend", "SlowBackend", "FailingBackend"]
