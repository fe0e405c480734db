"""
AdaBoost.MH Core Module

This module contains the main AdaBoostMH class that orchestrates all
components: it owns the instance table, runs the boosting iterations,
re-weights the training matrix after every base learner, and combines
the trained learners into a normalized class distribution.
"""

import os
import json
from datetime import datetime
from typing import Optional, List, Dict, Any, Sequence

import numpy as np

from .data_transforms import prepare_training_data
from .instance_table import InstanceTable
from .base_learner import BaseLearner
from .stump_learner import SingleStumpLearner
from .product_learner import ProductLearner
from ..base import MHBoostBase, ModelNotBuiltError


LEARNER_TYPES = {
    "SingleStumpLearner": SingleStumpLearner,
    "ProductLearner": ProductLearner
}


class AdaBoostMH(MHBoostBase):
    """
    Multi-class multi-label AdaBoost.MH with product-of-stumps base learners

    The strong classifier is f_k(x) = sum_t alpha_t * h_tk(x); the class
    distribution is exp(f_k(x)) normalized over the K classes.

    Training is iterative: ``initialize`` builds the instance table,
    every ``step`` adds one base learner and re-weights the table, and
    ``finish`` closes the run. ``fit`` chains the three.
    """

    FORMAT_VERSION = 1

    # a learner whose |alpha| does not exceed this carries no edge
    ZERO_EDGE_TOLERANCE = 1e-8

    def __init__(self,
                 n_iterations: int = 100,
                 product_size: int = 3,
                 base_learner: str = "DecisionStump",
                 use_product: bool = True,
                 stop_on_zero_edge: bool = True,
                 weight_tolerance: float = 1e-4,
                 strict_weights: bool = False,
                 verbose: bool = False,
                 debug: bool = False,
                 debug_dir: str = "."):
        """
        Initialize AdaBoostMH

        Parameters:
        -----------
        n_iterations : int
            Number of boosting iterations (T)
        product_size : int
            Number of stumps composed into one base learner (m)
        base_learner : str
            Learner composed inside the product ("DecisionStump")
        use_product : bool
            Train product learners; when False every iteration trains a single stump
        stop_on_zero_edge : bool
            Stop stepping once a trained learner carries no edge
        weight_tolerance : float
            Tolerance of the initial weight-sum check
        strict_weights : bool
            Raise instead of warning when the initial weights do not sum to 1
        verbose : bool
            Print iteration banners and learner summaries
        debug : bool
            Append label and weight matrix dumps to text files
        debug_dir : str
            Directory of the debug dumps
        """
        super().__init__(
            n_iterations=n_iterations,
            product_size=product_size
        )

        # Store parameters
        self.base_learner = base_learner
        self.use_product = use_product
        self.stop_on_zero_edge = stop_on_zero_edge
        self.weight_tolerance = weight_tolerance
        self.strict_weights = strict_weights
        self.verbose = verbose
        self.debug = debug
        self.debug_dir = debug_dir

        self._check_params()

        # Initialize storage
        self.table: Optional[InstanceTable] = None
        self.learners: List[BaseLearner] = []
        self.n_iterations_performed = 0
        self.feature_names: Optional[List[str]] = None
        self.history = self._empty_history()

        self._initialized = False
        self._finished = False
        self._converged = False

    def _check_params(self) -> None:
        super()._check_params()
        if self.base_learner not in ProductLearner.BASE_LEARNERS:
            raise ValueError(f"Unknown base learner: {self.base_learner}. "
                             f"Available: {list(ProductLearner.BASE_LEARNERS.keys())}")

    @staticmethod
    def _empty_history() -> Dict[str, List[float]]:
        return {
            'alpha': [],
            'energy': [],
            'n_stumps': [],
            'z_norm': [],
            'weight_sum': []
        }

    def initialize(self, X: Any, y: Any = None, class_column: Optional[str] = None,
                   classes: Optional[Sequence] = None) -> 'AdaBoostMH':
        """
        Validate the training data and build the instance table

        Parameters:
        -----------
        X : array-like or pandas.DataFrame, shape=(n_samples, n_features)
            Numeric predictor attributes (or a DataFrame holding the class column)
        y : array-like, shape=(n_samples,), optional
            Nominal class values; rows with a missing class are dropped
        class_column : str, optional
            Name of the class column inside X
        classes : sequence, optional
            Declared class values (defaults to the Categorical categories or the observed values)

        Returns:
        --------
        self : AdaBoostMH
        """
        X, class_indices, class_values, feature_names = prepare_training_data(
            X, y, class_column=class_column, classes=classes
        )

        self.classes_ = class_values
        self.n_classes = len(class_values)
        self.n_attributes = X.shape[1]
        self.feature_names = feature_names

        self.table = InstanceTable(
            X, class_indices, self.n_classes,
            weight_tolerance=self.weight_tolerance,
            strict_weights=self.strict_weights
        )

        self.learners = []
        self.n_iterations_performed = 0
        self.history = self._empty_history()
        self._initialized = True
        self._finished = False
        self._converged = False

        if self.debug:
            self.save_labels(os.path.join(self.debug_dir, "labels.txt"))

        return self

    def step(self) -> bool:
        """
        Run one boosting iteration

        Returns:
        --------
        continuing : bool
            True when a base learner was added, False when training is done
        """
        if not self._initialized:
            raise RuntimeError("initialize() must be called before step()")
        if self._finished:
            raise RuntimeError("Training already finished; call initialize() to train again")

        if (self.n_iterations_performed >= self.n_iterations
                or self.table.n_attributes == 0
                or self.table.n_instances == 0
                or self._converged):
            return False

        if self.verbose:
            print(f"<!-- ############################### Iteration {self.n_iterations_performed}"
                  f" begins ############################### -->")

        if self.debug:
            self.save_weights(os.path.join(self.debug_dir, "weights.txt"))

        learner = self._create_learner()
        learner.fit(self.table)

        z_norm = self._update_weights(learner)

        self.learners.append(learner)
        self.n_iterations_performed += 1
        self._record_history(learner, z_norm)

        if self.stop_on_zero_edge and abs(learner.alpha) <= self.ZERO_EDGE_TOLERANCE:
            self._converged = True

        if self.verbose:
            learner.print_learner_info()

        return True

    def finish(self) -> 'AdaBoostMH':
        """
        Close the training run; the model can no longer be stepped
        """
        self._finished = True
        return self

    def fit(self, X: Any, y: Any = None, class_column: Optional[str] = None,
            classes: Optional[Sequence] = None, **kwargs) -> 'AdaBoostMH':
        """
        Fit the AdaBoostMH model

        Parameters:
        -----------
        X : array-like or pandas.DataFrame, shape=(n_samples, n_features)
            Training features
        y : array-like, shape=(n_samples,), optional
            Training classes
        class_column : str, optional
            Name of the class column inside X
        classes : sequence, optional
            Declared class values

        Returns:
        --------
        self : AdaBoostMH
            Fitted model
        """
        self.initialize(X, y, class_column=class_column, classes=classes)

        while self.step():
            pass

        self.finish()
        return self

    def _create_learner(self) -> BaseLearner:
        if self.use_product:
            return ProductLearner(self.base_learner, self.product_size)
        return ProductLearner.BASE_LEARNERS[self.base_learner]()

    def _update_weights(self, learner: BaseLearner) -> float:
        """
        Re-weight the training matrix after a base learner was added

        w_il <- w_il * exp(-alpha * h_l(x_i) * y_il) / Z

        Parameters:
        -----------
        learner : BaseLearner
            The learner just trained (labels have been restored)

        Returns:
        --------
        z_norm : float
            Normalization factor Z
        """
        weights = self.table.weights
        hy = learner.predict_votes(self.table.attr_values) * self.table.labels
        factors = np.exp(-learner.alpha * hy)

        z_norm = float(np.sum(weights * factors))

        if self.verbose:
            print(f"Update Weights: Z = {z_norm}")

        np.multiply(weights, factors, out=weights)
        weights /= z_norm

        return z_norm

    def _record_history(self, learner: BaseLearner, z_norm: float) -> None:
        self.history['alpha'].append(learner.alpha)
        self.history['energy'].append(learner.energy)
        self.history['n_stumps'].append(getattr(learner, 'n_base_learners', 1))
        self.history['z_norm'].append(z_norm)
        self.history['weight_sum'].append(self.table.sum_weights())

    def decision_function(self, X: Any) -> np.ndarray:
        """
        Sum of alpha_t * h_tk(x) over the trained learners

        Parameters:
        -----------
        X : array-like, shape=(n_samples, n_features)
            Input features

        Returns:
        --------
        scores : np.ndarray, shape=(n_samples, n_classes)
        """
        self._check_is_built()
        X = self._validate_input(X)

        scores = np.zeros((X.shape[0], self.n_classes))
        for learner in self.learners:
            scores += learner.alpha * learner.predict_votes(X)

        return scores

    def predict_proba(self, X: Any) -> np.ndarray:
        """
        Predict class distributions

        Parameters:
        -----------
        X : array-like, shape=(n_samples, n_features)
            Input features

        Returns:
        --------
        probabilities : np.ndarray, shape=(n_samples, n_classes)
            Non-negative rows summing to 1
        """
        scores = self.decision_function(X)

        # shifting by the row maximum leaves the normalized result unchanged
        exp_scores = np.exp(scores - np.max(scores, axis=1, keepdims=True))
        totals = np.sum(exp_scores, axis=1, keepdims=True)

        degenerate = ~np.isfinite(totals[:, 0]) | (totals[:, 0] <= 0)
        totals[degenerate] = 1.0
        probabilities = exp_scores / totals
        probabilities[degenerate] = 1.0 / self.n_classes

        return probabilities

    def distribution_for_instance(self, x: Any, n_classes: Optional[int] = None) -> np.ndarray:
        """
        Class distribution of a single instance

        Parameters:
        -----------
        x : array-like, shape=(n_features,)
            Attribute vector
        n_classes : int, optional
            Declared number of classes; must match the trained model

        Returns:
        --------
        distribution : np.ndarray, shape=(n_classes,)
        """
        self._check_is_built()
        if n_classes is not None and n_classes != self.n_classes:
            raise ValueError(f"Instance declares {n_classes} classes, but model was trained with {self.n_classes} classes")

        x = np.asarray(x, dtype=np.float64).reshape(1, -1)
        return self.predict_proba(x)[0]

    def get_feature_importance(self) -> np.ndarray:
        """
        Get feature importance scores

        Every stump credits |alpha| of its learner to the attribute it splits on.

        Returns:
        --------
        feature_importance : np.ndarray, shape=(n_attributes,)
            Normalized importance scores
        """
        self._check_is_built()

        feature_importance = np.zeros(self.n_attributes)
        for learner in self.learners:
            for attr_index in learner.get_selected_attrs():
                feature_importance[attr_index] += abs(learner.alpha)

        # Normalize
        if np.sum(feature_importance) > 0:
            feature_importance = feature_importance / np.sum(feature_importance)

        return feature_importance

    def save_labels(self, file_path: str) -> None:
        """
        Append the label matrix to a text file
        """
        with open(file_path, 'a') as f:
            f.write("---------------- Labels after initialization of the raw data ----------------\n")
            for labels in self.table.labels:
                f.write("".join(f"{int(label)}        " for label in labels))
                f.write("\n")
            f.write("\n\n")

    def save_weights(self, file_path: str) -> None:
        """
        Append the current weight matrix to a text file
        """
        with open(file_path, 'a') as f:
            f.write(f"---------------- Iteration {self.n_iterations_performed} ----------------\n")
            for weights in self.table.weights:
                f.write("".join(f"{weight:.10f}        " for weight in weights))
                f.write("\n")
            f.write("\n\n")

    def get_learner_logs(self) -> List[Dict]:
        """
        Get parameter summaries of all base learners

        Returns:
        --------
        all_logs : List[Dict]
            One entry per boosting iteration
        """
        all_logs = []

        for i, learner in enumerate(self.learners):
            log = learner.get_info()
            log['iteration'] = i
            all_logs.append(log)

        return all_logs

    def save_logs_to_json(self, file_path: str) -> None:
        """
        Save learner logs to JSON file

        Parameters:
        -----------
        file_path : str
            Path to save the JSON file
        """
        all_logs = self.get_learner_logs()

        # Add timestamp
        for log in all_logs:
            log['timestamp'] = datetime.now().isoformat()

        with open(file_path, 'w') as f:
            json.dump(all_logs, f, ensure_ascii=False, indent=4)

        print(f"Learner logs saved to {file_path}")

    def get_params(self) -> Dict[str, Any]:
        params = super().get_params()
        params.update({
            'base_learner': self.base_learner,
            'use_product': self.use_product,
            'stop_on_zero_edge': self.stop_on_zero_edge,
            'weight_tolerance': self.weight_tolerance,
            'strict_weights': self.strict_weights,
            'verbose': self.verbose,
            'debug': self.debug,
            'debug_dir': self.debug_dir
        })
        return params

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializable description of the trained ensemble
        """
        self._check_is_built()
        return {
            'format_version': self.FORMAT_VERSION,
            'params': self.get_params(),
            'classes': self.classes_.tolist(),
            'n_attributes': self.n_attributes,
            'feature_names': self.feature_names,
            'learners': [learner.to_dict() for learner in self.learners]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AdaBoostMH':
        if data.get('format_version') != cls.FORMAT_VERSION:
            raise ValueError(f"Unsupported model format version: {data.get('format_version')}")

        model = cls(**data['params'])
        model.classes_ = np.asarray(data['classes'])
        model.n_classes = len(model.classes_)
        model.n_attributes = int(data['n_attributes'])
        model.feature_names = data.get('feature_names')

        learners = []
        for learner_data in data['learners']:
            learner_type = learner_data.get('learner_type')
            if learner_type not in LEARNER_TYPES:
                raise ValueError(f"Unknown learner type: {learner_type}")
            learners.append(LEARNER_TYPES[learner_type].from_dict(learner_data))

        model.learners = learners
        model.n_iterations_performed = len(learners)
        model._finished = True
        return model

    def save_model(self, file_path: str) -> None:
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)

    @classmethod
    def load_model(cls, file_path: str) -> 'AdaBoostMH':
        with open(file_path, 'r') as f:
            return cls.from_dict(json.load(f))

    def print_training_summary(self) -> None:
        """
        Print training summary
        """
        print(f"\n=== AdaBoostMH Training Summary ===")
        print(f"Iterations: {self.n_iterations_performed}/{self.n_iterations}")
        print(f"Product size: {self.product_size}")
        print(f"Classes: {self.n_classes}")
        print(f"Attributes: {self.n_attributes}")

        if self.history['energy']:
            print(f"Final energy: {self.history['energy'][-1]:.6f}")
            print(f"Average alpha: {np.mean(self.history['alpha']):.6f}")
            print(f"Average stumps per learner: {np.mean(self.history['n_stumps']):.2f}")

    def __str__(self) -> str:
        return f"AdaBoostMH with {self.n_iterations} iterations and {self.product_size} products"

    def __repr__(self) -> str:
        return self.__str__()
