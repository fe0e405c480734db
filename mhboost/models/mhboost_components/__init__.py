"""
AdaBoost.MH Components Package

This package contains the modular components of the AdaBoost.MH
implementation: the instance table, the stump search, the stump and
product base learners, and the boosting core.
"""

from .data_transforms import (
    validate_input_data,
    encode_class_labels,
    drop_missing_class,
    split_class_column,
    prepare_training_data
)
from .instance_table import InstanceTable
from .base_learner import BaseLearner
from .stump_algorithm import StumpAlgorithm
from .stump_learner import SingleStumpLearner
from .product_learner import ProductLearner
from .mhboost_core import AdaBoostMH, MHBoostBase, ModelNotBuiltError

__all__ = [
    'validate_input_data',
    'encode_class_labels',
    'drop_missing_class',
    'split_class_column',
    'prepare_training_data',
    'InstanceTable',
    'BaseLearner',
    'StumpAlgorithm',
    'SingleStumpLearner',
    'ProductLearner',
    'AdaBoostMH',
    'MHBoostBase',
    'ModelNotBuiltError'
]
