"""Common types and data structures for ptr2obs"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """2D position coordinates"""
    x: int
    y: int

    def isWithinDeadZone(self, other: "Position", radius: int) -> bool:
        """Check if both axis deltas to other are within radius"""
        return abs(self.x - other.x) <= radius and abs(self.y - other.y) <= radius


@dataclass(frozen=True)
class Region:
    """Axis-aligned display region in absolute screen coordinates"""
    name: str
    x: int
    y: int
    width: int
    height: int

    def contains(self, pos: Position) -> bool:
        """Check if position falls inside the region (right/bottom edges exclusive)"""
        return (
            self.x <= pos.x < self.x + self.width
            and self.y <= pos.y < self.y + self.height
        )

    def relative_get(self, pos: Position) -> Position:
        """Translate absolute position into region-relative coordinates"""
        return Position(x=pos.x - self.x, y=pos.y - self.y)
