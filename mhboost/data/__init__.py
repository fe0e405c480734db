"""
Synthetic datasets for AdaBoost.MH experiments and tests
"""

from .synthetic import (
    make_separable_1d,
    make_iris_like,
    make_xor_3class,
    make_constant_attribute,
    make_degenerate_class
)

__all__ = [
    'make_separable_1d',
    'make_iris_like',
    'make_xor_3class',
    'make_constant_attribute',
    'make_degenerate_class'
]
