from __future__ import annotations

from alertsim.api import webhook

__all__ = ["webhook"]
