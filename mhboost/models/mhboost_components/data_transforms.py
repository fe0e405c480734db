"""
Data Transform Utilities

This module contains the capability check applied to a training set and
the helpers that turn a raw dataset (numeric predictors plus one nominal
class attribute) into the arrays consumed by the InstanceTable.
"""

import numpy as np
import pandas as pd
from typing import Optional, Sequence, Tuple, List, Any


def validate_input_data(X: Any) -> Tuple[np.ndarray, List[str]]:
    """
    予測変数の検証と前処理

    Parameters:
    -----------
    X : array-like or pandas.DataFrame, shape=(n_samples, n_features)
        数値属性のみからなる特徴量行列

    Returns:
    --------
    X_validated : np.ndarray, shape=(n_samples, n_features)
        float64に変換された特徴量行列
    feature_names : list of str
        特徴量名（DataFrame以外の場合は "x0", "x1", ...）
    """
    if isinstance(X, pd.DataFrame):
        for column in X.columns:
            if not pd.api.types.is_numeric_dtype(X[column]):
                raise ValueError(f"Predictor attribute '{column}' is not numeric (dtype {X[column].dtype})")
        feature_names = [str(column) for column in X.columns]
        X = X.to_numpy(dtype=np.float64)
    else:
        X = np.asarray(X)
        if X.dtype.kind not in "biuf":
            raise ValueError(f"Predictor attributes must be numeric, got dtype {X.dtype}")
        X = X.astype(np.float64)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        feature_names = [f"x{j}" for j in range(X.shape[1] if X.ndim == 2 else 0)]

    if X.ndim != 2:
        raise ValueError(f"X must be 2D array, got {X.ndim}D")

    # 欠損値と無限値は扱わない
    if np.any(np.isnan(X)):
        raise ValueError("X contains missing values, which are not supported")
    if np.any(np.isinf(X)):
        raise ValueError("X contains infinite values")

    return X, feature_names


def _check_nominal(y: pd.Series) -> None:
    """
    クラス属性が名義属性であることを確認
    """
    if isinstance(y.dtype, pd.CategoricalDtype):
        return
    if pd.api.types.is_float_dtype(y.dtype) or pd.api.types.is_complex_dtype(y.dtype):
        raise ValueError(f"Class attribute must be nominal, got numeric dtype {y.dtype}")
    if y.dtype == object:
        observed = y[y.notna()]
        if any(isinstance(value, (float, complex, np.floating, np.complexfloating)) for value in observed):
            raise ValueError("Class attribute must be nominal, got numeric float values")


def encode_class_labels(y: Any, classes: Optional[Sequence] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    名義クラスをインデックスに変換

    The declared class set is taken from a pandas Categorical when one is
    given, otherwise from ``classes``, otherwise from the sorted distinct
    observed values.

    Parameters:
    -----------
    y : array-like, pandas.Series or pandas.Categorical, shape=(n_samples,)
        クラス値（欠損は None / NaN）
    classes : sequence, optional
        宣言されたクラス値の一覧

    Returns:
    --------
    class_indices : np.ndarray of int, shape=(n_samples,)
        クラスインデックス（欠損は -1）
    class_values : np.ndarray, shape=(n_classes,)
        宣言されたクラス値
    """
    if isinstance(y, (pd.Series, pd.Categorical, pd.Index, np.ndarray)):
        y = pd.Series(y)
    else:
        # plain sequences stay object so [0, 1, None] is not widened to float
        y = pd.Series(list(y), dtype=object)
    _check_nominal(y)

    if isinstance(y.dtype, pd.CategoricalDtype):
        if classes is not None:
            recoded = y.cat.set_categories(list(classes))
            _check_unknown_classes(y, recoded.cat.codes.to_numpy())
            y = recoded
        class_values = np.asarray(y.cat.categories)
        class_indices = y.cat.codes.to_numpy().astype(np.int64)
    else:
        missing = y.isna().to_numpy()
        if classes is None:
            class_values = np.asarray(sorted(pd.unique(y[~missing])))
        else:
            class_values = np.asarray(list(classes))
        _check_unknown_classes(y, np.where(y.isin(class_values), 0, -1))
        codes = pd.Categorical(y, categories=class_values).codes
        class_indices = np.asarray(codes, dtype=np.int64)

    if len(class_values) < 2:
        raise ValueError(f"Class attribute must declare at least two values, got {len(class_values)}")

    return class_indices, class_values


def _check_unknown_classes(y: pd.Series, codes: np.ndarray) -> None:
    unknown = (np.asarray(codes) == -1) & ~y.isna().to_numpy()
    if np.any(unknown):
        raise ValueError(f"Class values not among the declared classes: {sorted(set(y[unknown].astype(str)))}")


def drop_missing_class(X: np.ndarray, class_indices: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    クラスが欠損しているインスタンスを削除
    """
    keep = class_indices >= 0
    return X[keep], class_indices[keep]


def split_class_column(data: pd.DataFrame, class_column: str) -> Tuple[pd.DataFrame, pd.Series]:
    """
    DataFrameからクラス列を分離
    """
    if class_column not in data.columns:
        raise ValueError(f"Class column '{class_column}' not found in data")
    return data.drop(columns=[class_column]), data[class_column]


def prepare_training_data(
    X: Any,
    y: Any = None,
    class_column: Optional[str] = None,
    classes: Optional[Sequence] = None
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, List[str]]:
    """
    訓練データに対する能力チェックと変換

    Parameters:
    -----------
    X : array-like or pandas.DataFrame
        特徴量行列（class_column 指定時はクラス列を含むDataFrame）
    y : array-like, optional
        クラス値
    class_column : str, optional
        X に含まれるクラス列の名前
    classes : sequence, optional
        宣言されたクラス値の一覧

    Returns:
    --------
    X : np.ndarray, shape=(n_kept, n_features)
        クラス欠損行を除いた特徴量行列
    class_indices : np.ndarray, shape=(n_kept,)
        クラスインデックス
    class_values : np.ndarray, shape=(n_classes,)
        宣言されたクラス値
    feature_names : list of str
        特徴量名
    """
    if class_column is not None:
        if not isinstance(X, pd.DataFrame):
            raise ValueError("class_column requires X to be a pandas DataFrame")
        if y is not None:
            raise ValueError("Pass either y or class_column, not both")
        X, y = split_class_column(X, class_column)
    elif y is None:
        raise ValueError("Class values are required: pass y or class_column")

    X, feature_names = validate_input_data(X)
    class_indices, class_values = encode_class_labels(y, classes)

    if X.shape[0] != class_indices.shape[0]:
        raise ValueError(f"X ({X.shape[0]} samples) and y ({class_indices.shape[0]} samples) have different numbers of samples")

    X, class_indices = drop_missing_class(X, class_indices)

    return X, class_indices, class_values, feature_names
