"""
Stump Algorithm

This module handles the split search of a decision stump: for one
attribute it sweeps the sorted view of the instance table and picks the
threshold, vote vector and half edge of the best split.

The class-wise edge of a stump is

    gamma_l = v_l * sum_i w_il * phi(x_i) * y_il

Moving the split past instance i flips phi(x_i) from +1 to -1, so the
sweep only has to subtract w_il * y_il from the running half edges; the
vote vector v then fixes the sign of every class-wise edge.
"""

import numpy as np
from typing import Tuple

from .instance_table import InstanceTable


class StumpAlgorithm:
    """
    決定株の最適分割点を探索するクラス

    Attributes:
    -----------
    table : InstanceTable
        訓練データ
    half_weights_per_class : np.ndarray, shape=(n_classes,)
        クラスごとの重みの合計の半分
    init_half_edges : np.ndarray, shape=(n_classes,)
        閾値 -inf でのクラスごとのハーフエッジ 1/2 * sum_i w_il * y_il
    init_half_edge : float
        init_half_edges の絶対値の合計
    """

    # 属性値・エッジの同一判定に使う精度
    DOUBLE_PRECISION = 1e-6

    def __init__(self, table: InstanceTable):
        self.table = table

        self.n_attributes = table.n_attributes
        self.n_classes = table.n_classes
        self.n_instances = table.n_instances

        self.half_weights_per_class = np.zeros(self.n_classes)
        self.init_half_edges = np.zeros(self.n_classes)
        self.init_half_edge = 0.0

    def compute_init_half_edges(self) -> None:
        """
        初期ハーフエッジを計算

        Computed once per boosting iteration from the current weights and
        labels; shared by the sweeps over every attribute.
        """
        weights = self.table.weights
        weighted_labels = weights * self.table.labels

        self.half_weights_per_class = np.sum(weights, axis=0) / 2.0
        self.init_half_edges = np.sum(weighted_labels, axis=0) / 2.0
        self.init_half_edge = float(np.sum(np.abs(self.init_half_edges)))

    def find_best_stump(self, attr_index: int) -> Tuple[float, np.ndarray, float]:
        """
        指定された属性での最適な分割を探索

        The n + 1 candidate positions are "before the first instance"
        (threshold -inf), between consecutive distinct values, and "after
        the last instance" (threshold +inf).

        Parameters:
        -----------
        attr_index : int
            分割に使用する属性のインデックス

        Returns:
        --------
        threshold : float
            最適分割点の前後の属性値の平均（または -inf / +inf）
        vote_vector : np.ndarray, shape=(n_classes,)
            投票ベクトル（要素は +1 / -1）
        half_edge : float
            最適分割点でのハーフエッジ（クラスごとの絶対値の合計）
        """
        order, values = self.table.get_sorted_attr(attr_index)
        n = self.n_instances

        best_split_pos = 0
        best_half_edge = self.init_half_edge
        best_half_edges = self.init_half_edges.copy()

        if n > 0:
            # row p - 1 holds the class-wise half edges once p instances are stepped over
            steps = self.table.weights[order] * self.table.labels[order]
            curr_half_edges = np.subtract.accumulate(
                np.vstack([self.init_half_edges, steps]), axis=0
            )[1:]
            curr_totals = np.sum(np.abs(curr_half_edges), axis=1)

            # the position after the last instance always differs (+inf)
            next_values = np.append(values[1:], np.inf)
            candidate_positions = np.flatnonzero(np.abs(next_values - values) > self.DOUBLE_PRECISION) + 1

            for pos in candidate_positions:
                if curr_totals[pos - 1] - best_half_edge > self.DOUBLE_PRECISION:
                    best_half_edge = float(curr_totals[pos - 1])
                    best_split_pos = int(pos)
                    best_half_edges = curr_half_edges[pos - 1].copy()

        vote_vector = np.where(best_half_edges > 0, 1.0, -1.0)

        if best_split_pos == 0:
            threshold = -np.inf
        elif best_split_pos == n:
            threshold = np.inf
        else:
            threshold = float((values[best_split_pos - 1] + values[best_split_pos]) / 2.0)

        return threshold, vote_vector, best_half_edge
