import itertools

import torch as t
from jaxtyping import Integer

from .lattice import check_refinement_params


def _kuhn_paths(
    k: int, dim: int, device: t.device | str
) -> Integer[t.LongTensor, "subsimp vert dim"]:
    """
    Enumerate the Kuhn path simplices of the unit cubes that lie in the region
    `k >= y_1 >= ... >= y_dim >= 0`, as lattice points in the y coordinates.

    A path starts at a base point b with `k > b_1 >= ... >= b_dim >= 0` and steps
    once along every axis. Stepping axis a keeps the path in the region iff
    `y_{a-1} > y_a` at the current point, so the paths are grown one step at a time
    and only along allowed axes. Every partial path can be completed (e.g., by
    stepping the remaining axes in increasing order), so the number of partial paths
    never exceeds the `k**dim` complete ones.
    """
    bases = t.tensor(
        list(itertools.product(range(k), repeat=dim)), dtype=t.long, device=device
    )
    bases = bases[(bases[:, :-1] >= bases[:, 1:]).all(dim=-1)]

    eye = t.eye(dim, dtype=t.long, device=device)

    paths: Integer[t.LongTensor, "path step dim"] = bases[:, None, :]
    stepped = t.zeros(bases.shape, dtype=t.bool, device=device)

    for _ in range(dim):
        current = paths[:, -1, :]

        allowed = ~stepped
        allowed[:, 1:] &= current[:, :-1] > current[:, 1:]

        path_idx, axis = t.nonzero(allowed, as_tuple=True)
        step = eye[axis]

        paths = t.cat(
            (paths[path_idx], (current[path_idx] + step)[:, None, :]), dim=1
        )
        stepped = stepped[path_idx] | step.to(dtype=t.bool)

    return paths


def kuhn_compositions(
    k: int, dim: int, device: t.device | str = "cpu"
) -> Integer[t.LongTensor, "subsimp vert vert"]:
    """
    Split a `dim`-simplex into `k**dim` sub-simplices using the edgewise (Kuhn/
    Freudenthal) subdivision, and return the composition of every corner of every
    sub-simplex.

    In the lattice coordinates y, the refined simplex is the region
    `k >= y_1 >= y_2 >= ... >= y_dim >= 0`, and its sub-simplices are the Kuhn path
    simplices of the unit cubes that stay in the region. A lattice point y is
    converted to its composition with `c_j = y_j - y_{j+1}`, where `y_0 = k` and
    `y_{dim+1} = 0`; thus corner j of the original simplex is the point whose first
    j coordinates equal k and the rest are 0.

    The output is ordered by base point (lex order) and then by step sequence (lex
    order). Lattice points on faces shared by neighbouring sub-simplices appear
    once per sub-simplex.
    """
    check_refinement_params(k, dim)

    lattice_pts = _kuhn_paths(k, dim, device)

    n_subsimps = lattice_pts.size(0)
    padded = t.cat(
        (
            t.full((n_subsimps, dim + 1, 1), k, dtype=t.long, device=device),
            lattice_pts,
            t.zeros((n_subsimps, dim + 1, 1), dtype=t.long, device=device),
        ),
        dim=-1,
    )
    comps = padded[..., :-1] - padded[..., 1:]

    return comps
