"""
Single Stump Learner

This module contains the SingleStumpLearner class that runs the stump
search over every attribute and keeps the stump of minimum energy.
"""

import numpy as np
from typing import Any, Dict, List

from .base_learner import BaseLearner
from .instance_table import InstanceTable
from .stump_algorithm import StumpAlgorithm


class SingleStumpLearner(BaseLearner):
    """
    決定株（decision stump）の弱学習器

    h_k(x) = v_k * phi(x[selected_attr])
    """

    # エネルギーの同一判定に使う精度
    DOUBLE_PRECISION = 1e-8

    def fit(self, table: InstanceTable) -> 'SingleStumpLearner':
        """
        全属性について最適な決定株を求め、エネルギー最小のものを選択

        Parameters:
        -----------
        table : InstanceTable
            訓練データ（現在の重みとラベルを使用）

        Returns:
        --------
        self : SingleStumpLearner
            学習済みの決定株
        """
        self.initialize(table)
        self.smoothing = 0.01 / self.n_instances if self.n_instances > 0 else 0.0

        stump_algo = StumpAlgorithm(table)
        stump_algo.compute_init_half_edges()

        best_energy = np.inf

        for attr_index in range(self.n_attributes):
            threshold, vote_vector, half_edge = stump_algo.find_best_stump(attr_index)

            # half_edge is already gamma / 2
            eps_pls = 0.5 + half_edge
            eps_min = 0.5 - half_edge
            alpha = self.compute_alpha(eps_pls, eps_min)
            energy = self.compute_energy(eps_pls, eps_min)

            if best_energy - energy > self.DOUBLE_PRECISION:
                self.alpha = alpha
                self.vote_vector = vote_vector.copy()
                self.selected_attr = attr_index
                self.threshold = threshold
                best_energy = energy

        self.energy = best_energy
        return self

    def predict_votes(self, X: np.ndarray) -> np.ndarray:
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        phi = self.phi(X[:, self.selected_attr])
        return np.outer(phi, self.vote_vector)

    def get_selected_attrs(self) -> List[int]:
        return [self.selected_attr]

    def get_info(self) -> Dict[str, Any]:
        return {
            "learner_type": type(self).__name__,
            "alpha": self.alpha,
            "vote_vector": None if self.vote_vector is None else self.vote_vector.tolist(),
            "selected_attr": self.selected_attr,
            "threshold": self.threshold,
            "energy": self.energy
        }

    def to_dict(self) -> Dict[str, Any]:
        return self.get_info()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SingleStumpLearner':
        learner = cls()
        learner.alpha = float(data["alpha"])
        learner.vote_vector = np.asarray(data["vote_vector"], dtype=np.float64)
        learner.selected_attr = int(data["selected_attr"])
        learner.threshold = float(data["threshold"])
        learner.energy = float(data["energy"])
        learner.n_classes = len(learner.vote_vector)
        return learner

    def print_learner_info(self, indent: str = "") -> None:
        print(f"{indent}Alpha: {self.alpha}")
        print(f"{indent}Vote Vector - size: {len(self.vote_vector)}")
        for class_index, vote in enumerate(self.vote_vector):
            print(f"{indent}    class {class_index} : {vote}")
        print(f"{indent}Selected Attribute: {self.selected_attr}")
        print(f"{indent}Threshold: {self.threshold}")
        print(f"{indent}Energy: {self.energy}")

    def __str__(self) -> str:
        return (f"SingleStumpLearner(attr={self.selected_attr}, threshold={self.threshold:.4f}, "
                f"alpha={self.alpha:.4f}, energy={self.energy:.4f})")

    def __repr__(self) -> str:
        return self.__str__()
