from typing import NamedTuple

import torch as t
from jaxtyping import Float, Integer

from ..geometry.simplex_geometry import simplex_orientations
from ..utils.search import first_occurrence
from .kuhn import kuhn_compositions
from .lattice import composition_labels, corner_index


class Subdivision(NamedTuple):
    """
    The combinatorial rule for splitting a `dim`-simplex with a refinement factor `k`.

    `vertices` holds one composition per vertex of the subdivision: the first
    `dim + 1` rows are the original corners (in corner order), and the remaining
    rows are the new vertices in the order they are first encountered. `subsimplices`
    holds `k**dim` rows of `dim + 1` row indices into `vertices`.
    """

    vertices: Integer[t.LongTensor, "vert vert_of_simp"]
    subsimplices: Integer[t.LongTensor, "subsimp vert_of_simp"]

    @property
    def k(self) -> int:
        return int(self.vertices[0].sum().item())

    @property
    def dim(self) -> int:
        return self.vertices.size(1) - 1

    @property
    def new_vertices(self) -> Integer[t.LongTensor, "new_vert vert_of_simp"]:
        return self.vertices[self.dim + 1 :]


def subdivide(k: int, dim: int, device: t.device | str = "cpu") -> Subdivision:
    """
    Compute the vertex and sub-simplex tables for splitting a `dim`-simplex into
    `k**dim` sub-simplices.

    The raw table lists the corners of every sub-simplex, so that lattice points on
    shared faces are repeated. The lattice points are deduplicated by their integer
    labels, partitioned into the original corners and the new vertices, and the raw
    table is then rewritten in terms of the final vertex positions.
    """
    raw_comps: Integer[t.LongTensor, "subsimp vert vert"] = kuhn_compositions(
        k, dim, device=device
    )
    n_subsimps = raw_comps.size(0)

    flat_comps = raw_comps.reshape(-1, dim + 1)
    labels = composition_labels(flat_comps, k)

    # uniq_labels[inverse] recovers the labels of the raw table, so `inverse` serves
    # as the label -> unique id lookup.
    uniq_labels, inverse = t.unique(labels, return_inverse=True)
    n_uniq = uniq_labels.size(0)

    first_idx = first_occurrence(inverse, n_uniq)
    uniq_comps = flat_comps[first_idx]

    corner = corner_index(uniq_comps, k)
    is_new = corner == -1

    # Order the new vertices by their first occurrence in the raw table.
    new_uids = t.nonzero(is_new).flatten()
    new_uids = new_uids[first_idx[new_uids].argsort()]
    n_new = new_uids.size(0)

    uid_to_pos = t.empty(n_uniq, dtype=t.long, device=flat_comps.device)
    uid_to_pos[~is_new] = corner[~is_new]
    uid_to_pos[new_uids] = t.arange(
        dim + 1, dim + 1 + n_new, dtype=t.long, device=flat_comps.device
    )

    vertices = t.empty(
        (dim + 1 + n_new, dim + 1), dtype=t.long, device=flat_comps.device
    )
    vertices[uid_to_pos] = uniq_comps

    subsimplices = uid_to_pos[inverse].reshape(n_subsimps, dim + 1)

    return Subdivision(vertices=vertices, subsimplices=subsimplices)


def subsimplex_orientations(subdivision: Subdivision) -> Float[t.Tensor, " subsimp"]:
    """
    Compute the orientation of each sub-simplex relative to the original simplex.

    The compositions are read as coordinates in the chart that drops the weight of
    corner 0; in this chart, corner 0 sits at the origin and corner j at `k * e_j`,
    so the original simplex is positively oriented.
    """
    chart_coords = subdivision.vertices[:, 1:].to(dtype=t.get_default_dtype())
    return simplex_orientations(chart_coords, subdivision.subsimplices)


def subdivision_points(
    vert_coords: Float[t.Tensor, "vert_of_simp dim"], subdivision: Subdivision
) -> Float[t.Tensor, "vert dim"]:
    """
    Place the vertices of a subdivision in space, given the coordinates of the
    corners of a concrete simplex. Each vertex is the barycentric combination of
    the corners with weights `composition / k`.
    """
    weights = subdivision.vertices.to(dtype=vert_coords.dtype) / subdivision.k
    return weights @ vert_coords
