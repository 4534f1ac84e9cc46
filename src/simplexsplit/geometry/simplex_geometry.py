import math
from dataclasses import dataclass

import numpy as np
import torch as t
from jaxtyping import Float, Integer

from ..errors import DimensionMismatch, InvalidParameter


@dataclass(frozen=True)
class SimplexGeometry:
    """
    Per-simplex geometric summaries of a triangulation: the centroid and radius of
    a (not necessarily minimal) bounding sphere, the unsigned volume, and the
    orientation (sign of the signed volume; 0 for a degenerate simplex).
    """

    centroids: Float[t.Tensor, "simp dim"]
    radii: Float[t.Tensor, " simp"]
    volumes: Float[t.Tensor, " simp"]
    orientations: Float[t.Tensor, " simp"]


def check_simplex_table(
    vert_coords: Float[t.Tensor, "vert dim"], simps: Integer[t.LongTensor, "simp vert"]
):
    """
    Check that `simps` is a valid simplex index table for `vert_coords`: each row
    has `dim + 1` distinct, in-range vertex indices.
    """
    if vert_coords.ndim != 2:
        raise InvalidParameter("The vertex coordinates must form a 2D table.")
    if simps.ndim != 2:
        raise InvalidParameter("The simplex indices must form a 2D table.")
    if simps.dtype.is_floating_point or simps.dtype.is_complex:
        raise InvalidParameter("Simplex indices cannot be float or complex.")

    n_verts, dim = vert_coords.shape
    if dim < 1:
        raise InvalidParameter("The vertex coordinates must have at least one axis.")
    if simps.size(1) != dim + 1:
        raise DimensionMismatch(
            f"Simplices in {dim}D need {dim + 1} vertices each, got {simps.size(1)}."
        )

    if simps.numel() == 0:
        return

    if (simps < 0).any() or (simps >= n_verts).any():
        raise InvalidParameter("The simplex indices contain out-of-bound indices.")

    simps_sorted = simps.sort(dim=-1).values
    if (simps_sorted[:, 1:] == simps_sorted[:, :-1]).any():
        raise InvalidParameter("Each simplex must have distinct vertex indices.")


def _as_float(vert_coords: t.Tensor) -> t.Tensor:
    if vert_coords.dtype.is_floating_point:
        return vert_coords
    return vert_coords.to(dtype=t.get_default_dtype())


def simplex_centroids_radii(
    vert_coords: Float[t.Tensor, "vert dim"], simps: Integer[t.LongTensor, "simp vert"]
) -> tuple[Float[t.Tensor, "simp dim"], Float[t.Tensor, " simp"]]:
    """
    Compute the centroid of each simplex and the distance from the centroid to
    its farthest vertex. The sphere with this center and radius contains the
    simplex, but it is in general not the minimal bounding sphere.
    """
    simp_vert_coords: Float[t.Tensor, "simp vert dim"] = _as_float(vert_coords)[simps]

    centroids = simp_vert_coords.mean(dim=1)
    radii = t.linalg.norm(simp_vert_coords - centroids[:, None, :], dim=-1).amax(
        dim=-1
    )

    return centroids, radii


def simplex_signed_volumes(
    vert_coords: Float[t.Tensor, "vert dim"], simps: Integer[t.LongTensor, "simp vert"]
) -> Float[t.Tensor, " simp"]:
    """
    Compute the signed volume of each simplex. For a simplex v_0 v_1 ... v_dim,
    this is det([v_1 - v_0, ..., v_dim - v_0]) / dim!; swapping any two vertices
    flips the sign.
    """
    simp_vert_coords: Float[t.Tensor, "simp vert dim"] = _as_float(vert_coords)[simps]
    dim = simp_vert_coords.size(-1)

    simp_edges: Float[t.Tensor, "simp dim dim"] = (
        simp_vert_coords[:, 1:] - simp_vert_coords[:, :1]
    )

    return t.linalg.det(simp_edges) / math.factorial(dim)


def simplex_volumes(
    vert_coords: Float[t.Tensor, "vert dim"], simps: Integer[t.LongTensor, "simp vert"]
) -> Float[t.Tensor, " simp"]:
    return t.abs(simplex_signed_volumes(vert_coords, simps))


def simplex_orientations(
    vert_coords: Float[t.Tensor, "vert dim"], simps: Integer[t.LongTensor, "simp vert"]
) -> Float[t.Tensor, " simp"]:
    return t.sign(simplex_signed_volumes(vert_coords, simps))


def compute_geometry(
    vert_coords: Float[t.Tensor | np.ndarray, "vert dim"],
    simps: Integer[t.Tensor | np.ndarray, "simp vert"],
) -> SimplexGeometry:
    """
    Compute the centroid, bounding radius, volume, and orientation of every simplex
    in a triangulation.

    Degenerate simplices are not an error: flat simplices have zero volume and
    zero orientation, and a simplex whose vertices coincide has zero radius.
    """
    vert_coords = t.as_tensor(vert_coords)
    simps = t.as_tensor(simps, device=vert_coords.device)

    check_simplex_table(vert_coords, simps)

    centroids, radii = simplex_centroids_radii(vert_coords, simps)
    signed_vols = simplex_signed_volumes(vert_coords, simps)

    return SimplexGeometry(
        centroids=centroids,
        radii=radii,
        volumes=t.abs(signed_vols),
        orientations=t.sign(signed_vols),
    )
