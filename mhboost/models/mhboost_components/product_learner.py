"""
Product Learner

This module contains the ProductLearner class: a base learner whose
per-class output is the product of the outputs of up to m decision
stumps,

    h_k(x) = prod_b v_bk * phi_b(x)

The stumps are fitted by cycling through the m slots. Before a slot is
refitted the labels are multiplied by the outputs of all the other
slots ("virtual labels"), so each stump is trained on what the rest of
the product gets wrong. Cycling stops at the first slot that does not
strictly lower the energy. The label matrix is restored before fit
returns.
"""

import numpy as np
from typing import Any, Dict, List

from .base_learner import BaseLearner
from .instance_table import InstanceTable
from .stump_learner import SingleStumpLearner


class ProductLearner(BaseLearner):
    """
    決定株の積からなる弱学習器

    Attributes:
    -----------
    base_learner_name : str
        積を構成する弱学習器の種類
    product_size : int
        設定された積のサイズ m
    n_base_learners : int
        実際に使用する弱学習器の数 m'（最初の巡回で打ち切られた場合は m 未満）
    base_learners : list of BaseLearner
        積を構成する弱学習器
    energy_trace : list of float
        受理された積全体のエネルギーの推移
    """

    # エネルギーの同一判定に使う精度
    DOUBLE_PRECISION = 1e-8

    BASE_LEARNERS = {
        "DecisionStump": SingleStumpLearner
    }

    def __init__(self, base_learner_name: str = "DecisionStump", n_base_learners: int = 3):
        super().__init__()
        if base_learner_name not in self.BASE_LEARNERS:
            raise ValueError(f"Unknown base learner: {base_learner_name}. "
                             f"Available: {list(self.BASE_LEARNERS.keys())}")
        if n_base_learners < 1:
            raise ValueError(f"n_base_learners must be a positive integer, got {n_base_learners}")

        self.base_learner_name = base_learner_name
        self.product_size = n_base_learners
        self.n_base_learners = n_base_learners
        self.base_learners: List[BaseLearner] = []
        self.energy_trace: List[float] = []

    def initialize(self, table: InstanceTable) -> None:
        super().initialize(table)
        learner_class = self.BASE_LEARNERS[self.base_learner_name]
        self.base_learners = [learner_class() for _ in range(self.product_size)]
        self.n_base_learners = self.product_size
        self.energy_trace = []

    def fit(self, table: InstanceTable) -> 'ProductLearner':
        """
        積を構成する弱学習器を順に学習

        Parameters:
        -----------
        table : InstanceTable
            訓練データ（ラベルは学習中に書き換えられ、終了時に復元される）

        Returns:
        --------
        self : ProductLearner
            学習済みの弱学習器
        """
        self.initialize(table)

        with table.virtual_labels() as labels:
            first_pass = True
            ib = -1
            while True:
                ib += 1
                if ib >= self.product_size:
                    ib = 0
                    first_pass = False

                previous_energy = self.energy
                previous_alpha = self.alpha

                current_learner = self.base_learners[ib]

                # On later passes, take the old slot's contribution back out of
                # the labels before refitting it. Skipped on the first pass.
                if not first_pass:
                    self._update_virtual_labels(table, labels, current_learner)

                previous_learner = current_learner.copy_state()
                current_learner.fit(table)

                self.energy = current_learner.energy
                self.alpha = current_learner.alpha

                # fold the refitted slot into the labels for the next slot
                self._update_virtual_labels(table, labels, current_learner)

                if not (self.energy - previous_energy < -self.DOUBLE_PRECISION):
                    self.energy = previous_energy
                    self.alpha = previous_alpha

                    if first_pass:
                        self.n_base_learners = ib
                    else:
                        self.base_learners[ib] = previous_learner
                    break

                self.energy_trace.append(self.energy)

        self.base_learners = self.base_learners[:self.n_base_learners]
        return self

    @staticmethod
    def _update_virtual_labels(table: InstanceTable, labels: np.ndarray, learner: BaseLearner) -> None:
        """
        弱学習器の出力でラベルを書き換え

        Non-zero labels are flipped where h_k(x_i) < 0 and zeroed where
        h_k(x_i) == 0.
        """
        hx = learner.predict_votes(table.attr_values)
        active = labels != 0
        labels[active & (hx < 0)] *= -1
        labels[active & (hx == 0)] = 0

    def predict_votes(self, X: np.ndarray) -> np.ndarray:
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        votes = np.ones((X.shape[0], self.n_classes))
        for learner in self.base_learners[:self.n_base_learners]:
            votes *= learner.predict_votes(X)
        return votes

    def get_selected_attrs(self) -> List[int]:
        return [learner.selected_attr for learner in self.base_learners[:self.n_base_learners]]

    def get_info(self) -> Dict[str, Any]:
        return {
            "learner_type": type(self).__name__,
            "base_learner_name": self.base_learner_name,
            "alpha": self.alpha,
            "energy": self.energy,
            "product_size": self.product_size,
            "n_base_learners": self.n_base_learners,
            "base_learners": [learner.get_info() for learner in self.base_learners[:self.n_base_learners]]
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.get_info()
        data["n_classes"] = self.n_classes
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductLearner':
        learner = cls(base_learner_name=data.get("base_learner_name", "DecisionStump"),
                      n_base_learners=int(data["product_size"]))
        learner_class = cls.BASE_LEARNERS[learner.base_learner_name]
        learner.alpha = float(data["alpha"])
        learner.energy = float(data["energy"])
        learner.n_classes = int(data["n_classes"])
        learner.base_learners = [learner_class.from_dict(info) for info in data["base_learners"]]
        learner.n_base_learners = len(learner.base_learners)
        return learner

    def print_learner_info(self) -> None:
        print(f"    Alpha: {self.alpha}")
        print(f"    Amount of Base Learners: {self.n_base_learners}")
        for index, learner in enumerate(self.base_learners[:self.n_base_learners]):
            print(f"    Base Learner: {index + 1}")
            learner.print_learner_info(indent="        ")
        print()

    def __str__(self) -> str:
        return (f"ProductLearner(n_base_learners={self.n_base_learners}/{self.product_size}, "
                f"alpha={self.alpha:.4f}, energy={self.energy:.4f})")

    def __repr__(self) -> str:
        return self.__str__()
