"""
合成データ生成モジュール

このモジュールは、AdaBoost.MH の動作確認に使う
数値属性・名義クラスの合成データセットを生成します。
"""

import numpy as np
import pandas as pd
from typing import Tuple, Union


# IRIS データセットのクラスごとの平均と標準偏差
# (sepal length, sepal width, petal length, petal width)
IRIS_CLASS_STATS = {
    'Iris-setosa': ([5.006, 3.428, 1.462, 0.246], [0.352, 0.379, 0.174, 0.105]),
    'Iris-versicolor': ([5.936, 2.770, 4.260, 1.326], [0.516, 0.314, 0.470, 0.198]),
    'Iris-virginica': ([6.588, 2.974, 5.552, 2.026], [0.636, 0.322, 0.552, 0.275])
}

IRIS_FEATURE_NAMES = ['sepal_length', 'sepal_width', 'petal_length', 'petal_width']


def make_separable_1d() -> Tuple[np.ndarray, np.ndarray]:
    """
    1 属性で完全に分離可能な 2 クラスデータ

    Returns:
    --------
    X : np.ndarray, shape=(6, 1)
        x = 0, 1, ..., 5
    y : np.ndarray, shape=(6,)
        A, A, A, B, B, B
    """
    X = np.arange(6, dtype=np.float64).reshape(-1, 1)
    y = np.array(['A', 'A', 'A', 'B', 'B', 'B'])
    return X, y


def make_iris_like(n_per_class: int = 50, random_state: int = 0,
                   as_frame: bool = False) -> Union[Tuple[np.ndarray, np.ndarray], pd.DataFrame]:
    """
    IRIS と同じ形（3 クラス・4 属性）のデータを生成

    Parameters:
    -----------
    n_per_class : int, default=50
        クラスごとのサンプル数
    random_state : int, default=0
        乱数シード
    as_frame : bool, default=False
        True の場合は 'class' 列を含む DataFrame を返す

    Returns:
    --------
    X : np.ndarray, shape=(3 * n_per_class, 4)
        特徴量（小数第 1 位に丸める）
    y : np.ndarray, shape=(3 * n_per_class,)
        クラス名
    """
    rng = np.random.RandomState(random_state)

    features = []
    classes = []
    for class_name, (means, stds) in IRIS_CLASS_STATS.items():
        samples = rng.normal(loc=means, scale=stds, size=(n_per_class, len(means)))
        features.append(np.clip(np.round(samples, 1), 0.1, None))
        classes.extend([class_name] * n_per_class)

    X = np.vstack(features)
    y = np.array(classes)

    if as_frame:
        data = pd.DataFrame(X, columns=IRIS_FEATURE_NAMES)
        data['class'] = pd.Categorical(y, categories=list(IRIS_CLASS_STATS.keys()))
        return data

    return X, y


def make_xor_3class(n_per_quadrant: int = 25, random_state: int = 0) -> Tuple[np.ndarray, np.ndarray]:
    """
    単一の決定株では分離できない XOR 型の 3 クラスデータ

    Quadrants (+, +) and (-, -) belong to class A, (+, -) to class B and
    (-, +) to class C.

    Parameters:
    -----------
    n_per_quadrant : int, default=25
        象限ごとのサンプル数
    random_state : int, default=0
        乱数シード

    Returns:
    --------
    X : np.ndarray, shape=(4 * n_per_quadrant, 2)
        特徴量
    y : np.ndarray, shape=(4 * n_per_quadrant,)
        クラス名
    """
    rng = np.random.RandomState(random_state)

    quadrants = [
        ((1.0, 1.0), 'A'),
        ((-1.0, -1.0), 'A'),
        ((1.0, -1.0), 'B'),
        ((-1.0, 1.0), 'C')
    ]

    features = []
    classes = []
    for signs, class_name in quadrants:
        # keep every point away from the axes
        magnitudes = rng.uniform(0.1, 1.0, size=(n_per_quadrant, 2))
        features.append(magnitudes * np.asarray(signs))
        classes.extend([class_name] * n_per_quadrant)

    return np.vstack(features), np.array(classes)


def make_constant_attribute(n_samples: int = 10, value: float = 7.0) -> Tuple[np.ndarray, np.ndarray]:
    """
    すべての値が等しい 1 属性と均衡した 2 クラス
    """
    X = np.full((n_samples, 1), value)
    y = np.array(['A', 'B'] * (n_samples // 2) + ['A'] * (n_samples % 2))
    return X, y


def make_degenerate_class(n_samples: int = 30, n_features: int = 2,
                          random_state: int = 0) -> Tuple[np.ndarray, pd.Categorical]:
    """
    3 クラスを宣言しているが 1 クラスしか現れないデータ

    Returns:
    --------
    X : np.ndarray, shape=(n_samples, n_features)
        特徴量
    y : pandas.Categorical, shape=(n_samples,)
        すべて 'A'（カテゴリは A, B, C）
    """
    rng = np.random.RandomState(random_state)
    X = rng.normal(size=(n_samples, n_features))
    y = pd.Categorical(['A'] * n_samples, categories=['A', 'B', 'C'])
    return X, y
