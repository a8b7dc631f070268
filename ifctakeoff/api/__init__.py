"""Public API layer."""

from ifctakeoff.api.facade import TakeoffEngine

__all__ = ["TakeoffEngine"]
