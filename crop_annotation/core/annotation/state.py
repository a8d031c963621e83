"""
State data classes for the annotation engine.

Contains the world/screen geometry primitives and the Annotation entity.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Union
import uuid


@dataclass(frozen=True)
class Point:
    """2D point, in world or screen space depending on context."""

    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "Point":
        return cls(x=data["x"], y=data["y"])


@dataclass(frozen=True)
class CanvasRect:
    """On-screen bounding rectangle of the canvas."""

    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Viewport:
    """
    Pan offset and zoom of the canvas.

    Maps world space to screen space as ``screen = (world + offset) * scale``.
    """

    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0

    def with_changes(self, **changes) -> "Viewport":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "scale": self.scale}


def generate_annotation_id() -> str:
    return f"ann_{uuid.uuid4().hex}"


AnnotationRef = Union["Annotation", str]


def _ref_id(ref: AnnotationRef) -> str:
    return ref if isinstance(ref, str) else ref.id


@dataclass(eq=False)
class Annotation:
    """
    One labeled rectangular region.

    Attributes:
        type: Shape discriminator, only "rectangle" for now
        name: Class label, resolved to a color by the renderer
        bounds: Two opposite corners in world space, in drawing order
        associations: Ids of associated annotations (no duplicates)
        id: Unique identifier assigned at construction
    """

    type: str = "rectangle"
    name: str = "Default"
    bounds: List[Point] = field(default_factory=lambda: [Point(0, 0), Point(0, 0)])
    associations: List[str] = field(default_factory=list)
    id: str = field(default_factory=generate_annotation_id)

    def __post_init__(self):
        if len(self.bounds) != 2:
            raise ValueError(
                f"Annotation bounds must have exactly 2 points, got {len(self.bounds)}"
            )
        self.bounds = [
            p if isinstance(p, Point) else Point(p[0], p[1]) for p in self.bounds
        ]

    @classmethod
    def rectangle(cls, p0: Point, p1: Point, name: str = "Default") -> "Annotation":
        """Create a rectangle annotation from two corners."""
        return cls(type="rectangle", name=name, bounds=[p0, p1])

    def set_corner(self, index: int, point: Point):
        """Move one of the two corners."""
        self.bounds[index] = point

    def add_association(self, other: AnnotationRef):
        """Add an edge to another annotation (idempotent)."""
        other_id = _ref_id(other)
        if other_id == self.id:
            return
        if other_id not in self.associations:
            self.associations.append(other_id)

    def remove_association(self, other: AnnotationRef):
        """Remove an edge to another annotation (idempotent)."""
        other_id = _ref_id(other)
        self.associations = [i for i in self.associations if i != other_id]

    def is_associated_with(self, other: AnnotationRef) -> bool:
        return _ref_id(other) in self.associations

    def save(self) -> Dict[str, Any]:
        """Serializable form used by the exporter."""
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "bounds": [p.to_dict() for p in self.bounds],
            "associations": list(self.associations),
        }

    def to_dict(self) -> Dict[str, Any]:
        return self.save()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Annotation":
        return cls(
            type=data.get("type", "rectangle"),
            name=data.get("name", "Default"),
            bounds=[Point.from_dict(p) for p in data["bounds"]],
            associations=list(data.get("associations", [])),
            id=data["id"],
        )
