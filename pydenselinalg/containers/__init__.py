"""
Owning containers, non-owning views and matrix factories.
"""

from pydenselinalg.containers.vector import Vector, Orientation, ROW, COLUMN
from pydenselinalg.containers.matrix import Matrix, loosely_equal
from pydenselinalg.containers.views import VectorView, MatrixView
from pydenselinalg.containers.factories import identity_matrix, ones, permutation_matrix

__all__ = [
    "Vector",
    "Orientation",
    "ROW",
    "COLUMN",
    "Matrix",
    "loosely_equal",
    "VectorView",
    "MatrixView",
    "identity_matrix",
    "ones",
    "permutation_matrix",
]
