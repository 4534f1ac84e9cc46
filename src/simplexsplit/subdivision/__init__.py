from .lattice import composition_labels, enumerate_compositions
from .subdivide import (
    Subdivision,
    subdivide,
    subdivision_points,
    subsimplex_orientations,
)

__all__ = [
    "composition_labels",
    "enumerate_compositions",
    "Subdivision",
    "subdivide",
    "subdivision_points",
    "subsimplex_orientations",
]
