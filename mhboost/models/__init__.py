"""
AdaBoost.MH models

The components package is imported first; ``base`` reuses its input
validation helpers.
"""

from .mhboost_components import (
    AdaBoostMH,
    InstanceTable,
    StumpAlgorithm,
    SingleStumpLearner,
    ProductLearner
)
from .base import MHBoostBase, ModelNotBuiltError

__all__ = [
    'AdaBoostMH',
    'MHBoostBase',
    'ModelNotBuiltError',
    'InstanceTable',
    'StumpAlgorithm',
    'SingleStumpLearner',
    'ProductLearner'
]
