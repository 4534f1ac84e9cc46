import warnings
from dataclasses import dataclass

import numpy as np
import torch as t
from jaxtyping import Float, Integer
from scipy.spatial import Delaunay


@dataclass
class DelaunayConfig:
    """
    Options passed through to `scipy.spatial.Delaunay`. See the qhull documentation
    for the meaning of `qhull_options`; `None` uses the scipy defaults.
    """

    qhull_options: str | None = None
    furthest_site: bool = False


def triangulate(
    vert_coords: Float[t.Tensor | np.ndarray, "vert dim"],
    config: DelaunayConfig | None = None,
) -> Integer[t.LongTensor, "simp vert"]:
    """
    Compute the Delaunay triangulation of a point set with qhull and return the
    simplex index table (one row of `dim + 1` vertex indices per simplex).

    qhull errors (e.g., too few or degenerate points) are propagated unchanged.
    """
    if config is None:
        config = DelaunayConfig()

    if isinstance(vert_coords, t.Tensor):
        device = vert_coords.device
        vert_coords_np = vert_coords.detach().contiguous().cpu().numpy()
    else:
        device = t.device("cpu")
        vert_coords_np = np.asarray(vert_coords)

    tri = Delaunay(
        vert_coords_np,
        furthest_site=config.furthest_site,
        qhull_options=config.qhull_options,
    )

    if tri.coplanar.shape[0] > 0:
        warnings.warn(
            f"{tri.coplanar.shape[0]} point(s) were not included in the "
            "triangulation due to numerical precision issues.",
            UserWarning,
        )

    return t.from_numpy(tri.simplices.astype(np.int64)).to(device=device)
