"""
Point and triangle value types shared by the mesh builder and the STL sinks.
"""

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Point3:
    """A coordinate in millimeters."""
    x: float
    y: float
    z: float

    def __add__(self, other: "Point3") -> "Point3":
        return Point3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Point3") -> "Point3":
        return Point3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scale: float) -> "Point3":
        return Point3(self.x * scale, self.y * scale, self.z * scale)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> "Point3":
        return Point3(self.x / divisor, self.y / divisor, self.z / divisor)

    def dot(self, other: "Point3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Point3") -> "Point3":
        return Point3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def normalized(self) -> "Point3":
        length = self.length()
        if length == 0.0:
            raise ValueError("Cannot normalize a zero-length vector")
        return self / length

    def with_z(self, z: float) -> "Point3":
        return Point3(self.x, self.y, z)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


ORIGIN = Point3(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Triangle:
    """
    Three corners in emission order. The normal is always the zero vector, which
    STL readers take to mean "not computed".
    """
    v1: Point3
    v2: Point3
    v3: Point3
    normal: Point3 = ORIGIN

    @property
    def vertices(self) -> Tuple[Point3, Point3, Point3]:
        return (self.v1, self.v2, self.v3)
