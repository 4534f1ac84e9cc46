from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Literal

import numpy as np
import torch as t
from jaxtyping import Float, Integer

from .delaunay import DelaunayConfig, triangulate
from .errors import DimensionMismatch, InvalidParameter
from .geometry.simplex_geometry import (
    SimplexGeometry,
    check_simplex_table,
    compute_geometry,
)

Side = Literal["domain", "image"]


@dataclass(frozen=True)
class Triangulation:
    """
    A triangulation of a point set (the domain) together with the image of every
    point under a map. The domain and the image share the same simplex index table;
    i.e., the image triangulation is the domain triangulation carried forward
    vertex-for-vertex by the map.

    All fields, including the per-simplex geometry of both sides, are required up
    front; use `from_points()` or `from_embedding()` to compute the geometry.
    """

    points: Float[t.Tensor, "vert dim"]
    impoints: Float[t.Tensor, "vert dim"]
    simplex_inds: Integer[t.LongTensor, "simp vert_of_simp"]

    centroids: Float[t.Tensor, "simp dim"]
    radii: Float[t.Tensor, " simp"]
    volumes: Float[t.Tensor, " simp"]
    orientations: Float[t.Tensor, " simp"]

    centroids_im: Float[t.Tensor, "simp dim"]
    radii_im: Float[t.Tensor, " simp"]
    volumes_im: Float[t.Tensor, " simp"]
    orientations_im: Float[t.Tensor, " simp"]

    def __post_init__(self):
        if self.points.shape != self.impoints.shape:
            raise DimensionMismatch(
                "The domain and image point tables must have the same shape, got "
                f"{tuple(self.points.shape)} and {tuple(self.impoints.shape)}."
            )

        check_simplex_table(self.points, self.simplex_inds)

        n_simps = self.simplex_inds.size(0)
        dim = self.points.size(1)

        for name in ["centroids", "centroids_im"]:
            if getattr(self, name).shape != (n_simps, dim):
                raise DimensionMismatch(f"'{name}' must have shape {(n_simps, dim)}.")

        for name in [
            "radii",
            "volumes",
            "orientations",
            "radii_im",
            "volumes_im",
            "orientations_im",
        ]:
            if getattr(self, name).shape != (n_simps,):
                raise DimensionMismatch(f"'{name}' must have shape {(n_simps,)}.")

    @classmethod
    def from_points(
        cls,
        points: Float[t.Tensor | np.ndarray, "vert dim"],
        impoints: Float[t.Tensor | np.ndarray, "vert dim"],
        simplex_inds: Integer[t.Tensor | np.ndarray, "simp vert_of_simp"]
        | None = None,
        config: DelaunayConfig | None = None,
    ) -> Triangulation:
        """
        Build a triangulation from domain points and their images. If no simplex
        index table is given, the domain points are Delaunay triangulated.
        """
        points = t.as_tensor(points)
        impoints = t.as_tensor(impoints, device=points.device)

        if points.shape != impoints.shape:
            raise DimensionMismatch(
                "The domain and image point tables must have the same shape, got "
                f"{tuple(points.shape)} and {tuple(impoints.shape)}."
            )

        if simplex_inds is None:
            simplex_inds = triangulate(points, config)
        else:
            simplex_inds = t.as_tensor(simplex_inds, device=points.device)
            check_simplex_table(points, simplex_inds)
            simplex_inds = simplex_inds.to(dtype=t.long)

        geom = compute_geometry(points, simplex_inds)
        geom_im = compute_geometry(impoints, simplex_inds)

        return cls(
            points=points,
            impoints=impoints,
            simplex_inds=simplex_inds,
            centroids=geom.centroids,
            radii=geom.radii,
            volumes=geom.volumes,
            orientations=geom.orientations,
            centroids_im=geom_im.centroids,
            radii_im=geom_im.radii,
            volumes_im=geom_im.volumes,
            orientations_im=geom_im.orientations,
        )

    @classmethod
    def from_embedding(
        cls,
        embedding: Float[t.Tensor | np.ndarray, "time dim"],
        config: DelaunayConfig | None = None,
    ) -> Triangulation:
        """
        Build a triangulation from a time-ordered embedding, where the image of each
        point is the next point in the embedding. The last point has no image, so it
        is left out of the domain.
        """
        embedding = t.as_tensor(embedding)
        if embedding.ndim != 2 or embedding.size(0) < 2:
            raise InvalidParameter("The embedding must be a 2D table with >= 2 rows.")

        return cls.from_points(embedding[:-1], embedding[1:], config=config)

    @classmethod
    def from_dict(
        cls, fields_dict: dict[str, t.Tensor | np.ndarray]
    ) -> Triangulation:
        """
        Rebuild a triangulation from the output of `to_dict()`, e.g. after a round
        trip through `np.savez()`. The values may be tensors or numpy arrays; all of
        them are placed on the device of `points`.
        """
        device = t.as_tensor(fields_dict["points"]).device
        return cls(**{k: t.as_tensor(v, device=device) for k, v in fields_dict.items()})

    def to_dict(self) -> dict[str, t.Tensor]:
        return {field.name: getattr(self, field.name) for field in fields(self)}

    def to(self, device: str | t.device) -> Triangulation:
        return type(self)(**{k: v.to(device) for k, v in self.to_dict().items()})

    @property
    def n_points(self) -> int:
        return self.points.size(0)

    @property
    def n_simplices(self) -> int:
        return self.simplex_inds.size(0)

    @property
    def dim(self) -> int:
        return self.points.size(1)

    def geometry(self, side: Side = "domain") -> SimplexGeometry:
        match side:
            case "domain":
                return SimplexGeometry(
                    self.centroids, self.radii, self.volumes, self.orientations
                )
            case "image":
                return SimplexGeometry(
                    self.centroids_im,
                    self.radii_im,
                    self.volumes_im,
                    self.orientations_im,
                )
            case _:
                raise InvalidParameter("Unrecognized 'side' argument.")

    def simplex_coords(self, side: Side = "domain") -> Float[t.Tensor, "simp vert dim"]:
        """
        Gather the vertex coordinates of every simplex on the given side.
        """
        match side:
            case "domain":
                return self.points[self.simplex_inds]
            case "image":
                return self.impoints[self.simplex_inds]
            case _:
                raise InvalidParameter("Unrecognized 'side' argument.")

    def simplex(self, idx: int, side: Side = "domain") -> Float[t.Tensor, "vert dim"]:
        if not -self.n_simplices <= idx < self.n_simplices:
            raise InvalidParameter(
                f"Simplex index {idx} is out of range for {self.n_simplices} simplices."
            )
        return self.simplex_coords(side)[idx]
