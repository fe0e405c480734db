"""
AdaBoost.MH - Modular Implementation

This module serves as the main interface for the AdaBoost.MH
implementation. The code is split into modular components:

Architecture:
- data_transforms.py: Capability check and class encoding
- instance_table.py: InstanceTable class (training matrix, labels, weights, sorted views)
- base_learner.py: BaseLearner interface
- stump_algorithm.py: StumpAlgorithm class (split search)
- stump_learner.py: SingleStumpLearner class
- product_learner.py: ProductLearner class
- mhboost_core.py: AdaBoostMH main class
"""

# Import all classes from the modular components
from .mhboost_components import (
    AdaBoostMH,
    MHBoostBase,
    ModelNotBuiltError,
    BaseLearner,
    InstanceTable,
    StumpAlgorithm,
    SingleStumpLearner,
    ProductLearner,
    prepare_training_data
)

# Export the main classes for external use
__all__ = [
    'AdaBoostMH',
    'MHBoostBase',
    'ModelNotBuiltError',
    'BaseLearner',
    'InstanceTable',
    'StumpAlgorithm',
    'SingleStumpLearner',
    'ProductLearner',
    'prepare_training_data'
]
