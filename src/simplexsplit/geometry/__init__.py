from .simplex_geometry import SimplexGeometry, compute_geometry

__all__ = ["SimplexGeometry", "compute_geometry"]
