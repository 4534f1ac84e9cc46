import itertools

import torch as t
from jaxtyping import Integer

from ..errors import InvalidParameter
from ..utils.search import polynomial_hash


def check_refinement_params(k: int, dim: int):
    if k < 1:
        raise InvalidParameter(f"The refinement factor must be at least 1, got {k=}.")
    if dim < 1:
        raise InvalidParameter(f"The simplex dimension must be at least 1, got {dim=}.")


def enumerate_compositions(
    k: int, dim: int, device: t.device | str = "cpu"
) -> Integer[t.LongTensor, "comp vert"]:
    """
    Enumerate all compositions of `k` into `dim + 1` non-negative parts; i.e., the
    barycentric lattice points (scaled by `k`) of a `dim`-simplex refined by a
    factor of `k`. There are C(k + dim, dim) of them.

    The compositions are generated with stars and bars: each choice of `dim` bar
    positions among `k + dim` slots gives one composition, and the bar positions
    are visited in lex order so that the output order is deterministic.
    """
    check_refinement_params(k, dim)

    comps = []
    for bars in itertools.combinations(range(k + dim), dim):
        edges = (-1,) + bars + (k + dim,)
        comps.append([edges[i + 1] - edges[i] - 1 for i in range(dim + 1)])

    return t.tensor(comps, dtype=t.long, device=device)


def corner_compositions(
    k: int, dim: int, device: t.device | str = "cpu"
) -> Integer[t.LongTensor, "vert vert"]:
    """
    The compositions of the `dim + 1` corners of the original simplex, in corner
    order; corner j carries all of the weight `k` at position j.
    """
    check_refinement_params(k, dim)
    return k * t.eye(dim + 1, dtype=t.long, device=device)


def _check_compositions(comps: Integer[t.Tensor, "*comp vert"], k: int):
    if comps.dtype.is_floating_point or comps.dtype.is_complex:
        raise InvalidParameter("Compositions must be integer tensors.")
    if comps.ndim < 1 or comps.size(-1) < 2:
        raise InvalidParameter(
            "A composition must have at least two entries (one per simplex corner)."
        )
    if (comps < 0).any():
        raise InvalidParameter("Composition entries must be non-negative.")
    if (comps.sum(dim=-1) != k).any():
        raise InvalidParameter(f"Composition entries must sum to {k=}.")


def composition_labels(
    comps: Integer[t.Tensor, "*comp vert"], k: int
) -> Integer[t.LongTensor, " *comp"]:
    """
    Compute an integer label for each composition of `k`, such that two compositions
    share a label iff they are equal as sequences.

    The label is the positional sum `comp[i] * (k + 1)**i` over the first `dim`
    entries. Every entry is at most `k`, so base `k + 1` makes the encoding
    injective, and the last entry is fixed by the others through the sum.
    """
    _check_compositions(comps, k)
    return polynomial_hash(comps[..., :-1], base=k + 1)


def corner_index(
    comps: Integer[t.Tensor, "*comp vert"], k: int
) -> Integer[t.LongTensor, " *comp"]:
    """
    For each composition, find the original corner it coincides with, or -1 if it
    is not a corner. A composition coincides with corner j iff its weight is `k`
    at position j and 0 elsewhere; for a valid composition of `k`, this is the
    same as having any entry equal to `k`.

    Note that this test is tied to the composition encoding; it says nothing about
    coordinates.
    """
    _check_compositions(comps, k)

    at_k = comps == k
    is_corner = at_k.any(dim=-1)
    corner = at_k.to(t.long).argmax(dim=-1)

    return t.where(is_corner, corner, t.full_like(corner, -1))
