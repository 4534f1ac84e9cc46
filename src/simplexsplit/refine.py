from typing import Callable

import torch as t
from jaxtyping import Float, Integer

from .subdivision.subdivide import subdivide
from .triangulation import Triangulation
from .utils.search import first_occurrence


def _new_vertex_keys(
    simps: Integer[t.LongTensor, "simp vert"],
    new_comps: Integer[t.LongTensor, "new_vert vert"],
) -> Integer[t.LongTensor, "key key_entry"]:
    """
    Key every new vertex of every simplex by the global indices of the corners
    with non-zero weight and the weights themselves, sorted by corner index. Two
    simplices sharing a face produce identical keys for the new vertices on that
    face.
    """
    n_simps, n_verts = simps.shape
    n_new = new_comps.size(0)

    glob = simps[:, None, :].expand(n_simps, n_new, n_verts)
    weights = new_comps[None, :, :].expand(n_simps, n_new, n_verts)

    glob = t.where(weights > 0, glob, t.full_like(glob, -1))
    order = glob.argsort(dim=-1)

    keys = t.cat((glob.gather(-1, order), weights.gather(-1, order)), dim=-1)

    return keys.reshape(n_simps * n_new, 2 * n_verts)


def refine_triangulation(
    triangulation: Triangulation,
    k: int,
    image_fn: Callable[[Float[t.Tensor, "vert dim"]], Float[t.Tensor, "vert dim"]]
    | None = None,
) -> Triangulation:
    """
    Split every simplex of a triangulation into `k**dim` sub-simplices.

    New lattice points are shared between neighbouring simplices, so the refined
    triangulation stays conforming. The image of a new point is, by default, the
    same barycentric combination of the image corners (i.e., the map is linearly
    interpolated on each simplex); pass `image_fn` to evaluate the map at the new
    domain points instead. The original points keep their indices; new points are
    appended in the order they are first encountered.
    """
    dim = triangulation.dim
    simps = triangulation.simplex_inds
    points = triangulation.points
    impoints = triangulation.impoints

    if not points.dtype.is_floating_point:
        points = points.to(dtype=t.get_default_dtype())
        impoints = impoints.to(dtype=t.get_default_dtype())

    subdivision = subdivide(k, dim, device=simps.device)
    new_comps = subdivision.new_vertices

    if new_comps.size(0) == 0 or simps.size(0) == 0:
        return Triangulation.from_points(points, impoints, simps)

    n_simps = simps.size(0)
    n_new = new_comps.size(0)

    keys = _new_vertex_keys(simps, new_comps)
    uniq_keys, inverse = t.unique(keys, dim=0, return_inverse=True)
    n_uniq = uniq_keys.size(0)

    # Number the merged new points by first occurrence.
    first_idx = first_occurrence(inverse, n_uniq)
    order = first_idx.argsort()
    rank = t.empty_like(order)
    rank[order] = t.arange(n_uniq, dtype=order.dtype, device=order.device)

    global_new = points.size(0) + rank[inverse].reshape(n_simps, n_new)
    local_to_global = t.cat((simps, global_new), dim=-1)

    weights = new_comps.to(dtype=points.dtype) / k

    new_points = t.einsum("rv,svd->srd", weights, points[simps]).reshape(-1, dim)
    new_points = new_points[first_idx[order]]

    if image_fn is None:
        new_impoints = t.einsum("rv,svd->srd", weights, impoints[simps]).reshape(
            -1, dim
        )
        new_impoints = new_impoints[first_idx[order]]
    else:
        new_impoints = t.as_tensor(image_fn(new_points), device=points.device)

    refined_simps = local_to_global[:, subdivision.subsimplices].reshape(-1, dim + 1)

    return Triangulation.from_points(
        t.cat((points, new_points), dim=0),
        t.cat((impoints, new_impoints.to(dtype=impoints.dtype)), dim=0),
        refined_simps,
    )
