"""2D map coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True, slots=True)
class Coords:
    """A point (x, y) in 2D space. Defaults to the origin."""

    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Coords":
        """Build from a mapping; missing axes default to 0.0."""
        return cls(x=float(data.get("x", 0.0)), y=float(data.get("y", 0.0)))
