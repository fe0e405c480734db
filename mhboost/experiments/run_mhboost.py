"""
AdaBoost.MH 学習スクリプト

CSV ファイルを読み込み、AdaBoost.MH（決定株の積）を学習して
評価結果・モデル・学習ログ・プロットを出力します。

Usage:
    python -m mhboost.experiments.run_mhboost --input iris.csv --class-column class -I 100 -M 3
"""

import argparse
import os
import time
from typing import List, Optional

import pandas as pd

from ..models.mhboost_components import AdaBoostMH
from ..models.mhboost_components.data_transforms import split_class_column
from ..utils.model_interface import split_train_test
from ..utils.visualization import (
    create_results_directory,
    save_experiment_config,
    plot_training_history,
    plot_feature_importance
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Train AdaBoost.MH with products of decision stumps"
    )
    parser.add_argument('--input', required=True,
                        help="CSV file with numeric attributes and one nominal class column")
    parser.add_argument('--class-column', default=None,
                        help="Name of the class column (defaults to the last column)")
    parser.add_argument('-I', '--n-iterations', type=int, default=100,
                        help="Number of boosting iterations")
    parser.add_argument('-M', '--product-size', type=int, default=3,
                        help="Number of stumps in each product")
    parser.add_argument('--test-size', type=float, default=0.0,
                        help="Fraction of rows held out for evaluation")
    parser.add_argument('--random-state', type=int, default=42,
                        help="Seed of the train / test split")
    parser.add_argument('--output-dir', default="results",
                        help="Base directory of the experiment outputs")
    parser.add_argument('--save-model', action='store_true',
                        help="Save the trained ensemble as JSON")
    parser.add_argument('--verbose', action='store_true',
                        help="Print iteration banners and learner summaries")
    parser.add_argument('--debug', action='store_true',
                        help="Dump label and weight matrices to text files")
    return parser


def load_dataset(file_path: str, class_column: Optional[str] = None):
    """
    CSV を読み込み、特徴量とクラス列に分割

    Parameters:
    -----------
    file_path : str
        CSV ファイルのパス
    class_column : str, optional
        クラス列の名前（省略時は最後の列）

    Returns:
    --------
    X : pandas.DataFrame
        特徴量
    y : pandas.Series
        クラス値（文字列として読み込む）
    """
    data = pd.read_csv(file_path)
    if class_column is None:
        class_column = data.columns[-1]
    if class_column in data.columns:
        data[class_column] = data[class_column].astype('string')
    return split_class_column(data, class_column)


def train(argv: Optional[List[str]] = None) -> AdaBoostMH:
    args = build_parser().parse_args(argv)

    X, y = load_dataset(args.input, args.class_column)
    feature_names = list(X.columns)

    results_dir = create_results_directory(args.output_dir)
    save_experiment_config(vars(args), results_dir)
    print(f"Results directory: {results_dir}")

    # クラス集合はテスト分割の前に全データから決める
    classes = sorted(y.dropna().unique())

    if args.test_size > 0:
        X_train, y_train, X_test, y_test = split_train_test(
            X.to_numpy(), y.to_numpy(dtype=object), test_size=args.test_size,
            random_state=args.random_state
        )
        X_train = pd.DataFrame(X_train, columns=feature_names)
        X_test = pd.DataFrame(X_test, columns=feature_names)
    else:
        X_train, y_train = X, y
        X_test, y_test = None, None

    model = AdaBoostMH(
        n_iterations=args.n_iterations,
        product_size=args.product_size,
        verbose=args.verbose,
        debug=args.debug,
        debug_dir=results_dir
    )

    start_time = time.time()
    model.fit(X_train, y_train, classes=classes)
    train_time = time.time() - start_time

    model.print_training_summary()
    print(f"Training time: {train_time:.4f}s")

    if not model.learners:
        print("No base learner was trained")
        return model

    train_results = model.evaluate(X_train, y_train, metrics=['accuracy', 'error_rate'])
    print(f"Train accuracy: {train_results['accuracy']:.4f}")

    if X_test is not None and len(X_test) > 0:
        test_results = model.evaluate(X_test, y_test, metrics=['accuracy', 'error_rate', 'log_loss'])
        print(f"Test accuracy: {test_results['accuracy']:.4f}")
        print(f"Test log loss: {test_results['log_loss']:.4f}")

    importance = pd.Series(model.get_feature_importance(), index=feature_names)
    print("\nFeature importance:")
    print(importance.sort_values(ascending=False).to_string())

    model.save_logs_to_json(os.path.join(results_dir, "learner_logs.json"))
    plot_training_history(model, save_path=os.path.join(results_dir, "figures", "training_history.png"))
    plot_feature_importance(model, save_path=os.path.join(results_dir, "figures", "feature_importance.png"))

    if args.save_model:
        model_path = os.path.join(results_dir, "models", "adaboost_mh.json")
        model.save_model(model_path)
        print(f"Model saved to {model_path}")

    return model


def main(argv: Optional[List[str]] = None) -> None:
    train(argv)


if __name__ == "__main__":
    main()
