from typing import Literal

import torch as t
from jaxtyping import Bool, Float, Integer

from ..errors import InvalidParameter
from ..geometry.simplex_geometry import SimplexGeometry
from ..triangulation import Triangulation

Direction = Literal["domain_to_image", "image_to_domain"]


def spheres_overlap(
    centers_1: Float[t.Tensor, "*b dim"],
    radii_1: Float[t.Tensor, " *b"],
    centers_2: Float[t.Tensor, "*b dim"],
    radii_2: Float[t.Tensor, " *b"],
) -> Bool[t.Tensor, " *b"]:
    """
    Check (with broadcasting) whether two spheres overlap; i.e., whether the
    squared distance between their centers is strictly smaller than the squared
    sum of their radii.
    """
    sq_dist = t.sum((centers_1 - centers_2) ** 2, dim=-1)
    return sq_dist < (radii_1 + radii_2) ** 2


def _query_and_target(
    triangulation: Triangulation, direction: Direction
) -> tuple[SimplexGeometry, SimplexGeometry]:
    match direction:
        case "domain_to_image":
            return triangulation.geometry("domain"), triangulation.geometry("image")
        case "image_to_domain":
            return triangulation.geometry("image"), triangulation.geometry("domain")
        case _:
            raise InvalidParameter("Unrecognized 'direction' argument.")


def candidates(
    triangulation: Triangulation,
    query_idx: int,
    direction: Direction = "domain_to_image",
) -> Integer[t.LongTensor, " cand"]:
    """
    Find the simplices on the other side of the triangulation whose bounding spheres
    overlap the bounding sphere of the simplex `query_idx`.

    For `direction="domain_to_image"`, the query is a domain simplex and the
    candidates are image simplices; `"image_to_domain"` is the reverse. Each
    bounding sphere contains its simplex, so no pair of intersecting simplices is
    ever left out; pairs whose spheres overlap but whose simplices do not must be
    resolved by an exact intersection test. Each query scans all simplices of the
    other side (O(n)); no spatial index is built.
    """
    query, target = _query_and_target(triangulation, direction)

    n_simps = triangulation.n_simplices
    if not 0 <= query_idx < n_simps:
        raise InvalidParameter(
            f"Simplex index {query_idx} is out of range for {n_simps} simplices."
        )

    overlap = spheres_overlap(
        query.centroids[query_idx],
        query.radii[query_idx],
        target.centroids,
        target.radii,
    )

    return t.nonzero(overlap).flatten()


def candidate_pairs(
    triangulation: Triangulation, direction: Direction = "domain_to_image"
) -> Integer[t.LongTensor, "pair 2"]:
    """
    Run the bounding sphere test for every simplex on the query side at once, and
    return the (query index, candidate index) pairs in lex order. This costs
    O(n * m) time and memory.
    """
    query, target = _query_and_target(triangulation, direction)

    overlap: Bool[t.Tensor, "query target"] = spheres_overlap(
        query.centroids[:, None, :],
        query.radii[:, None],
        target.centroids[None, :, :],
        target.radii[None, :],
    )

    return t.nonzero(overlap)
