import os
import random

import numpy as np
import pytest
import torch as t

from simplexsplit.triangulation import Triangulation


def pytest_addoption(parser):
    """
    Add a commandline option to specify a global RNG seed.
    """
    parser.addoption(
        "--rng-seed",
        action="store",
        default=0,
        type=int,
        help="Seed for random number generators. Use -1 for a random seed.",
    )


@pytest.fixture(scope="session")
def session_seed(request):
    """
    Determines the RNG seed for the entire session.
    """
    seed_arg = request.config.getoption("--rng-seed")

    if seed_arg == -1:
        seed = int.from_bytes(os.urandom(4), "big")
        print(f"\n[RNG] Using Random Session Seed: {seed}")
    else:
        seed = seed_arg

    return seed


@pytest.fixture(scope="function", autouse=True)
def set_rng(session_seed):
    """
    Resets the RNG state before each test function using the session seed.
    """
    t.manual_seed(session_seed)
    np.random.seed(session_seed)
    random.seed(session_seed)

    if t.cuda.is_available():
        t.cuda.manual_seed_all(session_seed)

    yield


def pytest_configure(config):
    """
    Add custom 'cpu_only' and 'gpu_only' markers to mark a test as running
    exclusively on CPU or GPU.
    """
    config.addinivalue_line("markers", "cpu_only: mark test to run only on cpu.")
    config.addinivalue_line("markers", "gpu_only: mark test to run only on gpu.")


@pytest.fixture(params=["cpu", "cuda"])
def device(request) -> t.device:
    """
    Run tests accepting this fixture on both CPU and GPU (when available).
    """
    mode = request.param

    if mode == "cuda" and not t.cuda.is_available():
        pytest.skip("[GPU] Skipping CUDA test: No GPU available.")

    if mode == "cpu" and request.node.get_closest_marker("gpu_only"):
        pytest.skip()

    if mode == "cuda" and request.node.get_closest_marker("cpu_only"):
        pytest.skip()

    return t.device(mode)


@pytest.fixture
def two_tris_triangulation() -> Triangulation:
    """
    The unit square split into two triangles along its diagonal; the image is the
    square rotated by 90 degrees about its center.
    """
    points = t.tensor(
        [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]], dtype=t.float64
    )
    center = t.tensor([0.5, 0.5], dtype=t.float64)
    rot = t.tensor([[0.0, -1.0], [1.0, 0.0]], dtype=t.float64)
    impoints = (points - center) @ rot.T + center

    return Triangulation.from_points(
        points, impoints, t.tensor([[0, 1, 2], [0, 2, 3]], dtype=t.long)
    )


@pytest.fixture
def unit_tet_triangulation() -> Triangulation:
    """
    A single unit tetrahedron; the image is the tet scaled by 2.
    """
    points = t.tensor(
        [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]],
        dtype=t.float64,
    )
    return Triangulation.from_points(
        points, 2.0 * points, t.tensor([[0, 1, 2, 3]], dtype=t.long)
    )


@pytest.fixture
def random_square_triangulation() -> Triangulation:
    """
    A Delaunay triangulation of the unit square corners plus random interior points;
    the image is a small affine perturbation of the domain.
    """
    corners = t.tensor(
        [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]], dtype=t.float64
    )
    interior = 0.1 + 0.8 * t.rand(26, 2, dtype=t.float64)
    points = t.vstack((corners, interior))

    affine = t.tensor([[0.9, 0.1], [-0.05, 1.1]], dtype=t.float64)
    impoints = points @ affine.T + t.tensor([0.05, -0.02], dtype=t.float64)

    return Triangulation.from_points(points, impoints)
