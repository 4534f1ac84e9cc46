import pytest
import torch as t

from simplexsplit.errors import InvalidParameter
from simplexsplit.intersection.broad_phase import (
    candidate_pairs,
    candidates,
    spheres_overlap,
)
from simplexsplit.triangulation import Triangulation


def test_overlapping_triangles_are_candidates():
    points = t.tensor([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    impoints = points + t.tensor([0.25, 0.25])
    tri = Triangulation.from_points(points, impoints, t.tensor([[0, 1, 2]]))

    t.testing.assert_close(candidates(tri, 0, "domain_to_image"), t.tensor([0]))
    t.testing.assert_close(candidates(tri, 0, "image_to_domain"), t.tensor([0]))


def test_distant_triangles_are_not_candidates():
    points = t.tensor([[0.0, 0.0], [0.1, 0.0], [0.0, 0.1]])
    impoints = points + t.tensor([100.0, -50.0])
    tri = Triangulation.from_points(points, impoints, t.tensor([[0, 1, 2]]))

    assert candidates(tri, 0, "domain_to_image").numel() == 0
    assert candidates(tri, 0, "image_to_domain").numel() == 0
    assert candidate_pairs(tri).shape == (0, 2)


def test_rotated_square(two_tris_triangulation):
    # Both the domain and the image tile the unit square, so every domain
    # triangle overlaps every image triangle.
    pairs = candidate_pairs(two_tris_triangulation, "domain_to_image")
    t.testing.assert_close(pairs, t.tensor([[0, 0], [0, 1], [1, 0], [1, 1]]))


def test_tangent_spheres_do_not_overlap():
    overlap = spheres_overlap(
        t.tensor([0.0, 0.0]), t.tensor(1.0), t.tensor([2.0, 0.0]), t.tensor(1.0)
    )
    assert not overlap.item()


def test_candidates_match_candidate_pairs(random_square_triangulation):
    tri = random_square_triangulation

    for direction in ["domain_to_image", "image_to_domain"]:
        pairs = candidate_pairs(tri, direction)
        for query_idx in range(tri.n_simplices):
            expected = pairs[pairs[:, 0] == query_idx, 1]
            t.testing.assert_close(candidates(tri, query_idx, direction), expected)


def test_directions_are_symmetric(random_square_triangulation):
    forward = candidate_pairs(random_square_triangulation, "domain_to_image")
    backward = candidate_pairs(random_square_triangulation, "image_to_domain")

    forward_set = set(map(tuple, forward.tolist()))
    backward_set = set(map(tuple, backward[:, [1, 0]].tolist()))

    assert forward_set == backward_set


def test_no_false_negatives(random_square_triangulation):
    """
    If the centroid of a domain simplex lies inside an image simplex, the two
    simplices intersect and must be reported as a candidate pair.
    """
    tri = random_square_triangulation
    im_coords = tri.simplex_coords("image")

    # Barycentric coordinates of every domain centroid wrt every image simplex.
    im_edges = (im_coords[:, 1:] - im_coords[:, :1]).transpose(-1, -2)
    rhs = tri.centroids[:, None, :] - im_coords[None, :, 0, :]
    lam = t.linalg.solve(im_edges[None].expand(tri.n_simplices, -1, -1, -1), rhs)
    inside = (lam >= 0).all(dim=-1) & (lam.sum(dim=-1) <= 1)

    pairs = set(map(tuple, candidate_pairs(tri, "domain_to_image").tolist()))
    expected = set(map(tuple, t.nonzero(inside).tolist()))

    assert len(expected) > 0
    assert expected <= pairs


def test_invalid_queries(two_tris_triangulation):
    with pytest.raises(InvalidParameter):
        candidates(two_tris_triangulation, 2)

    with pytest.raises(InvalidParameter):
        candidates(two_tris_triangulation, -1)

    with pytest.raises(InvalidParameter):
        candidates(two_tris_triangulation, 0, "sideways")
