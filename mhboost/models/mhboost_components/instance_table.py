"""
Instance Table

This module contains the InstanceTable class that owns the training
matrix, the per-instance label and weight vectors, and the per-attribute
sorted views used by the stump search.
"""

import warnings
from contextlib import contextmanager
from typing import Iterator, Tuple

import numpy as np


class InstanceTable:
    """
    訓練データ全体を保持するクラス

    学習中に存在する唯一のデータコピー。重みはブースティングの各反復で
    更新され、ラベルは ProductLearner の内部でのみ一時的に書き換えられる
    （ProductLearner は終了前に必ず元のラベルを復元する）。

    Attributes:
    -----------
    attr_values : np.ndarray, shape=(n_instances, n_attributes)
        属性値行列
    labels : np.ndarray of int8, shape=(n_instances, n_classes)
        ラベル行列（真のクラスは +1、それ以外は -1。学習中のみ 0 も現れる）
    weights : np.ndarray, shape=(n_instances, n_classes)
        重み行列（合計は 1）
    sorted_indices : np.ndarray, shape=(n_attributes, n_instances)
        各属性の値で昇順に並べたインスタンスのインデックス
    sorted_values : np.ndarray, shape=(n_attributes, n_instances)
        sorted_indices に対応する属性値
    """

    def __init__(
        self,
        X: np.ndarray,
        class_indices: np.ndarray,
        n_classes: int,
        weight_tolerance: float = 1e-4,
        strict_weights: bool = False
    ):
        X = np.array(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        class_indices = np.asarray(class_indices, dtype=np.int64)

        if X.shape[0] != class_indices.shape[0]:
            raise ValueError(f"X ({X.shape[0]} samples) and class_indices ({class_indices.shape[0]} samples) have different numbers of samples")
        if n_classes < 2:
            raise ValueError(f"At least two classes are required, got {n_classes}")
        if np.any((class_indices < 0) | (class_indices >= n_classes)):
            raise ValueError(f"Class indices must lie in [0, {n_classes})")

        self.n_instances, self.n_attributes = X.shape
        self.n_classes = n_classes
        self.weight_tolerance = weight_tolerance

        self.attr_values = X
        self.class_indices = class_indices.copy()
        self.labels = self._init_labels()
        self.weights = self._init_weights()
        self.sorted_indices, self.sorted_values = self._sort_attributes()

        if self.n_instances > 0:
            self.check_weights(strict=strict_weights)

    def _init_labels(self) -> np.ndarray:
        labels = np.full((self.n_instances, self.n_classes), -1, dtype=np.int8)
        labels[np.arange(self.n_instances), self.class_indices] = 1
        return labels

    def _init_weights(self) -> np.ndarray:
        """
        重みの初期化

        y = +1 なら 1/(2n)、y = -1 なら 1/(2n(K-1))
        """
        n = self.n_instances
        if n == 0:
            return np.zeros((0, self.n_classes))
        positive_weight = 1.0 / (2 * n)
        negative_weight = 1.0 / (2 * n * (self.n_classes - 1))
        return np.where(self.labels == 1, positive_weight, negative_weight)

    def _sort_attributes(self) -> Tuple[np.ndarray, np.ndarray]:
        order = np.argsort(self.attr_values, axis=0, kind="stable")
        values = np.take_along_axis(self.attr_values, order, axis=0)
        return np.ascontiguousarray(order.T), np.ascontiguousarray(values.T)

    def sum_weights(self) -> float:
        return float(np.sum(self.weights))

    def check_weights(self, strict: bool = False) -> float:
        """
        重みの合計が 1 であることを確認

        Parameters:
        -----------
        strict : bool, default=False
            True の場合は警告ではなく例外を送出

        Returns:
        --------
        total : float
            重みの合計
        """
        total = self.sum_weights()
        if abs(total - 1.0) > self.weight_tolerance:
            message = f"Sum of weights ({total}) != 1"
            if strict:
                raise ValueError(message)
            warnings.warn(message, RuntimeWarning)
        return total

    def get_attr_values(self, index: int) -> np.ndarray:
        return self.attr_values[index]

    def get_labels(self, index: int) -> np.ndarray:
        # view: writes go straight into the label matrix
        return self.labels[index]

    def get_weights(self, index: int) -> np.ndarray:
        return self.weights[index]

    def get_sorted_attr(self, attr_index: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        属性 attr_index で昇順に並べた (インデックス, 値) を取得
        """
        return self.sorted_indices[attr_index], self.sorted_values[attr_index]

    def backup_labels(self) -> np.ndarray:
        return self.labels.copy()

    def restore_labels(self, saved_labels: np.ndarray) -> None:
        np.copyto(self.labels, saved_labels)

    @contextmanager
    def virtual_labels(self) -> Iterator[np.ndarray]:
        """
        ラベル行列を一時的に書き換えるためのスコープ

        The label matrix is yielded for in-place mutation and restored to
        its entry state on every exit path.
        """
        saved_labels = self.backup_labels()
        try:
            yield self.labels
        finally:
            self.restore_labels(saved_labels)

    def __repr__(self) -> str:
        return (f"InstanceTable(n_instances={self.n_instances}, "
                f"n_attributes={self.n_attributes}, n_classes={self.n_classes})")
