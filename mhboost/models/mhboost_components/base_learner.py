"""
Base Learner Implementation

This module contains the BaseLearner class that represents one base
learner of the boosted ensemble: its trained parameters, the alpha and
energy calculus and the phi decision function.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict

import numpy as np

from .instance_table import InstanceTable


class BaseLearner(ABC):
    """
    弱学習器の抽象基底クラス

    h_k(x) = alpha * v_k * phi(x) の形の弱学習器が共通に持つパラメータを保持する。

    Attributes:
    -----------
    alpha : float
        強学習器におけるこの弱学習器の重み
    vote_vector : np.ndarray or None, shape=(n_classes,)
        各クラスの投票ベクトル V（要素は +1 / -1）
    selected_attr : int
        分割に使用する属性のインデックス
    threshold : float
        phi の閾値（-inf / +inf も取り得る）
    energy : float
        訓練誤差の上界 Z（最小化の対象、未学習時は +inf）
    smoothing : float
        alpha 計算時の平滑化項
    """

    def __init__(self):
        self.n_attributes = 0
        self.n_classes = 0
        self.n_instances = 0
        self.smoothing = 0.0

        self.alpha = 0.0
        self.vote_vector = None
        self.selected_attr = 0
        self.threshold = 0.0
        self.energy = np.inf

    def initialize(self, table: InstanceTable) -> None:
        self.n_attributes = table.n_attributes
        self.n_classes = table.n_classes
        self.n_instances = table.n_instances

        # a restored snapshot already carries its vote vector
        if self.vote_vector is None:
            self.vote_vector = np.zeros(self.n_classes)

    @abstractmethod
    def fit(self, table: InstanceTable) -> 'BaseLearner':
        """
        現在の重みとラベルで学習

        Parameters:
        -----------
        table : InstanceTable
            訓練データ

        Returns:
        --------
        self : BaseLearner
            学習済みの弱学習器
        """
        pass

    @abstractmethod
    def predict_votes(self, X: np.ndarray) -> np.ndarray:
        """
        各クラスの出力 h_k(x) を計算

        Parameters:
        -----------
        X : array-like, shape=(n_samples, n_attributes)
            入力特徴量

        Returns:
        --------
        votes : np.ndarray, shape=(n_samples, n_classes)
            h_k(x)（alpha は掛けない）
        """
        pass

    def classify(self, x: np.ndarray, class_index: int) -> float:
        """
        1 インスタンス・1 クラスの出力 h_k(x)
        """
        x = np.asarray(x, dtype=np.float64).reshape(1, -1)
        return float(self.predict_votes(x)[0, class_index])

    def classify_instance(self, table: InstanceTable, instance_index: int, class_index: int) -> float:
        return self.classify(table.get_attr_values(instance_index), class_index)

    def compute_alpha(self, eps_pls: float, eps_min: float) -> float:
        """
        alpha = 1/2 * ln((eps_pls + s) / (eps_min + s))

        eps_pls is (1 + gamma) / 2 and eps_min is (1 - gamma) / 2.
        """
        return float(0.5 * np.log((eps_pls + self.smoothing) / (eps_min + self.smoothing)))

    @staticmethod
    def compute_energy(eps_pls: float, eps_min: float) -> float:
        """
        Z = 2 * sqrt(eps_pls * eps_min) + (1 - eps_pls - eps_min)
        """
        # the product only dips below zero through rounding when |gamma| hits 1
        return float(2.0 * np.sqrt(max(eps_pls * eps_min, 0.0)) + (1.0 - eps_min - eps_pls))

    def phi(self, attr_values: np.ndarray) -> np.ndarray:
        """
        phi(x) = +1 if x > threshold else -1
        """
        return np.where(np.asarray(attr_values) > self.threshold, 1.0, -1.0)

    def copy_state(self) -> 'BaseLearner':
        """
        学習済みパラメータの複製（ロールバック用）
        """
        return copy.deepcopy(self)

    @abstractmethod
    def get_info(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def print_learner_info(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(alpha={self.alpha:.6f}, energy={self.energy:.6f})"
