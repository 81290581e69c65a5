"""
Optional inference backends for grid_yolo.

Backends are kept in a separate module so the decode pipeline stays
lightweight and can be used without installing inference runtimes.
"""

from __future__ import annotations

__all__ = []
