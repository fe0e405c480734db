"""
mhboost: multi-class AdaBoost.MH with product-of-stumps base learners
"""

from .models import (
    AdaBoostMH,
    MHBoostBase,
    ModelNotBuiltError,
    InstanceTable,
    StumpAlgorithm,
    SingleStumpLearner,
    ProductLearner
)

__version__ = "0.1.0"

__all__ = [
    'AdaBoostMH',
    'MHBoostBase',
    'ModelNotBuiltError',
    'InstanceTable',
    'StumpAlgorithm',
    'SingleStumpLearner',
    'ProductLearner'
]
