class InvalidParameter(ValueError):
    """
    Raised when an argument is outside its valid domain; e.g., a refinement factor
    k < 1, a malformed composition, or a simplex index table with out-of-range or
    repeated vertex indices.
    """


class DimensionMismatch(ValueError):
    """
    Raised when table shapes disagree; e.g., a simplex row width that is not the
    point dimension plus one, or domain and image point tables of different sizes.
    """
