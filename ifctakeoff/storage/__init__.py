"""Persistence for classification overrides."""

from ifctakeoff.storage.database import OverrideDatabase
from ifctakeoff.storage.store import ClassificationStore

__all__ = ["ClassificationStore", "OverrideDatabase"]
