"""Synthetic alert load generator and Alertmanager notification collector."""
from __future__ import annotations

__version__ = "1.0.0"
