import torch as t
from jaxtyping import Integer

from ..errors import InvalidParameter


def polynomial_hash(
    rows: Integer[t.Tensor, "*row digit"], base: int
) -> Integer[t.Tensor, " *row"]:
    """
    Pack each row of non-negative integer digits into a single int64 using a
    polynomial hash with the digit at position i weighted by `base**i`. The hash
    is injective as long as every digit is smaller than `base`.
    """
    dtype = t.int64
    n_digits = rows.size(-1)

    max_allowed_hash_val = t.iinfo(dtype).max
    worst_case_hash_val = float(base) ** n_digits
    if worst_case_hash_val > max_allowed_hash_val:
        raise InvalidParameter(
            f"Polynomial hash overflow: base {base} with {n_digits} digits does "
            "not fit in int64."
        )

    exponent = t.arange(n_digits, device=rows.device, dtype=dtype)
    coef = t.pow(t.tensor(base, device=rows.device, dtype=dtype), exponent)

    return t.einsum("...d,d->...", rows.to(dtype), coef)


def first_occurrence(
    inverse: Integer[t.Tensor, " item"], n_unique: int
) -> Integer[t.Tensor, " unique"]:
    """
    Given the `return_inverse` output of `torch.unique()`, find for each unique
    value the position of its first occurrence in the original sequence.
    """
    n_items = inverse.size(0)
    positions = t.arange(n_items, device=inverse.device, dtype=t.int64)

    first_idx = t.full(
        (n_unique,), n_items, device=inverse.device, dtype=t.int64
    ).scatter_reduce(0, inverse, positions, reduce="amin")

    return first_idx
