"""
モデルインターフェース確認用モジュール

このモジュールは、AdaBoost.MH 分類器の共通インターフェース
（fit / predict / predict_proba / evaluate）を確認し、
積のサイズごとの性能を比較するためのユーティリティを提供します。
"""

import numpy as np
from typing import Dict, Optional, Sequence, Tuple, Any
import time

from ..models.mhboost_components import AdaBoostMH


def split_train_test(X: np.ndarray, y: np.ndarray, test_size: float = 0.2,
                     random_state: Optional[int] = None) -> Tuple:
    """
    データを訓練用とテスト用にランダムに分割

    Parameters:
    -----------
    X : array-like, shape=(n_samples, n_features)
        特徴量
    y : array-like, shape=(n_samples,)
        クラス値
    test_size : float, default=0.2
        テストデータの割合
    random_state : int, optional
        乱数シード

    Returns:
    --------
    X_train, y_train, X_test, y_test : tuple of np.ndarray
    """
    X = np.asarray(X)
    y = np.asarray(y)
    rng = np.random.RandomState(random_state)
    order = rng.permutation(X.shape[0])

    n_test = int(X.shape[0] * test_size)
    test_idx, train_idx = order[:n_test], order[n_test:]

    return X[train_idx], y[train_idx], X[test_idx], y[test_idx]


def evaluate_model_interface(X: np.ndarray, y: np.ndarray,
                             model_class=AdaBoostMH,
                             model_params: Optional[Dict] = None,
                             test_size: float = 0.3,
                             random_state: int = 42) -> Dict[str, Any]:
    """
    モデルのインターフェースを確認

    Parameters:
    -----------
    X : array-like, shape=(n_samples, n_features)
        特徴量
    y : array-like, shape=(n_samples,)
        クラス値
    model_class : class, default=AdaBoostMH
        確認するモデルクラス
    model_params : dict, optional
        モデルのパラメータ
    test_size : float, default=0.3
        テストデータの割合
    random_state : int, default=42
        乱数シード

    Returns:
    --------
    results : dict
        確認結果
    """
    # デフォルトパラメータ
    if model_params is None:
        model_params = {
            'n_iterations': 10,
            'product_size': 3
        }

    X_train, y_train, X_test, y_test = split_train_test(X, y, test_size=test_size,
                                                        random_state=random_state)

    # モデルを初期化
    model = model_class(**model_params)

    # 学習時間を計測
    start_time = time.time()
    model.fit(X_train, y_train)
    train_time = time.time() - start_time

    # 予測時間を計測
    start_time = time.time()
    y_pred = model.predict(X_test)
    predict_time = time.time() - start_time

    probabilities = model.predict_proba(X_test)
    if not np.allclose(probabilities.sum(axis=1), 1.0):
        raise ValueError("predict_proba rows do not sum to 1")
    if y_pred.shape[0] != X_test.shape[0]:
        raise ValueError("predict returned a wrong number of predictions")

    # 評価
    eval_results = model.evaluate(X_test, y_test, metrics=['accuracy', 'error_rate', 'log_loss'])
    train_results = model.evaluate(X_train, y_train, metrics=['accuracy'])

    results = {
        'model_class': model_class.__name__,
        'train_time': train_time,
        'predict_time': predict_time,
        'n_learners': len(model.learners),
        'train_accuracy': train_results['accuracy'],
        'evaluation': eval_results
    }

    return results


def compare_product_sizes(X: np.ndarray, y: np.ndarray,
                          product_sizes: Sequence[int] = (1, 3, 5),
                          n_iterations: int = 20) -> Dict[str, Dict[str, Any]]:
    """
    積のサイズ M ごとに学習して比較

    Parameters:
    -----------
    X : array-like, shape=(n_samples, n_features)
        特徴量
    y : array-like, shape=(n_samples,)
        クラス値
    product_sizes : sequence of int, default=(1, 3, 5)
        比較する積のサイズ
    n_iterations : int, default=20
        ブースティング反復回数

    Returns:
    --------
    results : dict
        M ごとの比較結果（訓練精度、1 反復目のエネルギー、学習時間など）
    """
    results = {}

    for product_size in product_sizes:
        print(f"Testing M={product_size}...")
        model = AdaBoostMH(n_iterations=n_iterations, product_size=product_size)

        start_time = time.time()
        model.fit(X, y)
        train_time = time.time() - start_time

        results[f"M={product_size}"] = {
            'product_size': product_size,
            'train_time': train_time,
            'n_learners': len(model.learners),
            'first_energy': model.history['energy'][0] if model.history['energy'] else np.nan,
            'mean_stumps': float(np.mean(model.history['n_stumps'])) if model.history['n_stumps'] else 0.0,
            'train_accuracy': model.evaluate(X, y, metrics=['accuracy'])['accuracy'] if model.learners else np.nan
        }

    return results
