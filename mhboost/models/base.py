"""
AdaBoost.MH基底クラスモジュール

このモジュールは、マルチクラス・ブースティング分類器の
抽象基底クラスを提供します。
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Dict, List, Optional, Any

from .mhboost_components.data_transforms import validate_input_data, encode_class_labels


class ModelNotBuiltError(RuntimeError):
    """Raised when classification is requested before any base learner was trained."""


class MHBoostBase(ABC):
    """
    マルチクラス・ブースティング分類器の抽象基底クラス

    Attributes:
    -----------
    n_iterations : int
        ブースティング反復回数（T）
    product_size : int
        各弱学習器を構成する決定株の数（m）
    n_classes : int or None
        クラス数（K）
    classes_ : np.ndarray or None
        宣言されたクラス値
    learners : list
        学習済みの弱学習器のリスト
    """

    def __init__(self,
                 n_iterations: int = 100,
                 product_size: int = 3,
                 **kwargs):
        """
        初期化メソッド

        Parameters:
        -----------
        n_iterations : int, default=100
            ブースティング反復回数
        product_size : int, default=3
            各弱学習器を構成する決定株の数
        **kwargs : dict
            追加のパラメータ
        """
        self.n_iterations = n_iterations
        self.product_size = product_size
        self.n_classes = None
        self.n_attributes = None
        self.classes_ = None
        self.learners = []

        # 追加のパラメータを設定
        for key, value in kwargs.items():
            setattr(self, key, value)

    @abstractmethod
    def fit(self, X: Any, y: Any = None, **kwargs) -> 'MHBoostBase':
        """
        モデルを学習

        Parameters:
        -----------
        X : array-like or pandas.DataFrame, shape=(n_samples, n_features)
            数値属性の特徴量
        y : array-like, shape=(n_samples,)
            名義クラス値
        **kwargs : dict
            追加のパラメータ

        Returns:
        --------
        self : MHBoostBase
            学習済みモデル
        """
        pass

    @abstractmethod
    def predict_proba(self, X: Any) -> np.ndarray:
        """
        クラスごとの確率分布を予測

        Parameters:
        -----------
        X : array-like, shape=(n_samples, n_features)
            入力特徴量

        Returns:
        --------
        probabilities : np.ndarray, shape=(n_samples, n_classes)
            各行の合計が 1 になる確率分布
        """
        pass

    def predict(self, X: Any) -> np.ndarray:
        """
        最も確率の高いクラス値を予測
        """
        probabilities = self.predict_proba(X)
        return self.classes_[np.argmax(probabilities, axis=1)]

    def _check_is_built(self) -> None:
        if not self.learners:
            raise ModelNotBuiltError("No model built")

    def _validate_input(self, X: Any) -> np.ndarray:
        """
        予測用の入力データの検証

        Parameters:
        -----------
        X : array-like
            入力特徴量

        Returns:
        --------
        X : np.ndarray
            検証・変換後の入力特徴量
        """
        X, _ = validate_input_data(X)
        if self.n_attributes is not None and X.shape[1] != self.n_attributes:
            raise ValueError(f"X has {X.shape[1]} features, but model was trained with {self.n_attributes} features")
        return X

    def evaluate(self, X: Any, y: Any, metrics: List[str] = ['accuracy']) -> Dict[str, float]:
        """
        モデルの評価

        Parameters:
        -----------
        X : array-like, shape=(n_samples, n_features)
            入力特徴量
        y : array-like, shape=(n_samples,)
            真のクラス値（欠損したインスタンスは無視）
        metrics : list of str, default=['accuracy']
            使用する評価指標のリスト（accuracy / error_rate / log_loss）

        Returns:
        --------
        results : dict
            各評価指標の値
        """
        self._check_is_built()
        X = self._validate_input(X)
        class_indices, _ = encode_class_labels(y, classes=self.classes_)
        if X.shape[0] != class_indices.shape[0]:
            raise ValueError(f"X ({X.shape[0]} samples) and y ({class_indices.shape[0]} samples) have different numbers of samples")

        keep = class_indices >= 0
        probabilities = self.predict_proba(X[keep])
        class_indices = class_indices[keep]
        predicted = np.argmax(probabilities, axis=1)

        results = {}

        for metric in metrics:
            if metric.lower() == 'accuracy':
                results['accuracy'] = float(np.mean(predicted == class_indices))

            elif metric.lower() == 'error_rate':
                results['error_rate'] = float(np.mean(predicted != class_indices))

            elif metric.lower() == 'log_loss':
                true_probs = probabilities[np.arange(len(class_indices)), class_indices]
                results['log_loss'] = float(-np.mean(np.log(np.clip(true_probs, 1e-15, 1.0))))

            else:
                raise ValueError(f"Unknown metric: {metric}")

        return results

    def get_params(self) -> Dict[str, Any]:
        """
        モデルパラメータの取得

        Returns:
        --------
        params : dict
            モデルパラメータ
        """
        return {
            'n_iterations': self.n_iterations,
            'product_size': self.product_size
        }

    def set_params(self, **params) -> 'MHBoostBase':
        """
        モデルパラメータの設定

        Parameters:
        -----------
        **params : dict
            設定するパラメータ

        Returns:
        --------
        self : MHBoostBase
            パラメータを更新したモデル
        """
        valid_params = self.get_params()
        for key, value in params.items():
            if key in valid_params:
                setattr(self, key, value)
            else:
                raise ValueError(f"Invalid parameter: {key}")
        self._check_params()
        return self

    def _check_params(self) -> None:
        for name in ('n_iterations', 'product_size'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
