from .broad_phase import candidate_pairs, candidates, spheres_overlap

__all__ = ["candidates", "candidate_pairs", "spheres_overlap"]
