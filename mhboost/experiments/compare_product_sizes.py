"""
積のサイズ比較実験モジュール

このモジュールは、弱学習器を構成する決定株の数 M を変えたときの
AdaBoost.MH の性能（精度・エネルギー・学習時間）を
合成データ上で比較するための実験スクリプトを提供します。
"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
import os
import json
from typing import Dict, Optional, Sequence

from ..utils.model_interface import compare_product_sizes, evaluate_model_interface
from ..utils.visualization import plot_product_size_comparison, save_results_table
from ..data.synthetic import make_iris_like, make_xor_3class


def run_product_size_comparison(dataset_name: str,
                                X: np.ndarray,
                                y: np.ndarray,
                                product_sizes: Sequence[int] = (1, 2, 3, 5),
                                n_iterations: int = 50,
                                output_dir: str = "results") -> Dict:
    """
    積のサイズごとの比較を 1 データセットで実行

    Parameters:
    -----------
    dataset_name : str
        データセット名
    X : array-like
        入力特徴量
    y : array-like
        クラス値
    product_sizes : sequence of int, default=(1, 2, 3, 5)
        比較する積のサイズ
    n_iterations : int, default=50
        ブースティング反復回数
    output_dir : str, default="results"
        結果の出力ディレクトリ

    Returns:
    --------
    results : dict
        比較結果
    """
    # 出力ディレクトリが存在しない場合は作成
    os.makedirs(output_dir, exist_ok=True)

    results = {
        'dataset': dataset_name,
        'n_samples': X.shape[0],
        'n_features': X.shape[1],
        'n_classes': len(np.unique(y)),
        'product_sizes': compare_product_sizes(X, y, product_sizes=product_sizes,
                                               n_iterations=n_iterations),
        'holdout': {}
    }

    for product_size in product_sizes:
        print(f"\nEvaluating M={product_size} on {dataset_name} (holdout)...")
        holdout = evaluate_model_interface(
            X, y,
            model_params={'n_iterations': n_iterations, 'product_size': product_size}
        )
        results['holdout'][f"M={product_size}"] = holdout

        # 結果を表示
        print(f"  Train time: {holdout['train_time']:.4f}s")
        print(f"  Accuracy: {holdout['evaluation']['accuracy']:.4f}")
        print(f"  Log loss: {holdout['evaluation']['log_loss']:.4f}")

    # 結果をJSONファイルに保存
    with open(os.path.join(output_dir, f"{dataset_name}_product_sizes.json"), 'w') as f:
        json.dump(results, f, indent=2, default=float)

    save_results_table(results['product_sizes'],
                       os.path.join(output_dir, f"{dataset_name}_product_sizes.csv"))
    plot_product_size_comparison(results['product_sizes'],
                                 title=f"Product Size Comparison on {dataset_name}",
                                 save_path=os.path.join(output_dir, f"{dataset_name}_product_sizes.png"))
    plot_holdout_results(results, os.path.join(output_dir, f"{dataset_name}_holdout.png"))

    return results


def plot_holdout_results(results: Dict, save_path: Optional[str] = None) -> None:
    """
    ホールドアウト評価の結果をプロット

    Parameters:
    -----------
    results : dict
        比較結果
    save_path : str, optional
        保存先のパス
    """
    labels = list(results['holdout'].keys())

    train_times = [results['holdout'][label]['train_time'] for label in labels]
    accuracies = [results['holdout'][label]['evaluation']['accuracy'] for label in labels]
    log_losses = [results['holdout'][label]['evaluation']['log_loss'] for label in labels]

    fig, axes = plt.subplots(1, 3, figsize=(18, 5))
    fig.suptitle(f"AdaBoost.MH Holdout Results on {results['dataset']} Dataset", fontsize=16)

    sns.barplot(x=labels, y=accuracies, ax=axes[0])
    axes[0].set_title('Accuracy')
    axes[0].set_ylim(0, 1)

    sns.barplot(x=labels, y=log_losses, ax=axes[1])
    axes[1].set_title('Log Loss')

    sns.barplot(x=labels, y=train_times, ax=axes[2])
    axes[2].set_title('Training Time (s)')
    axes[2].set_ylabel('Time (s)')

    plt.tight_layout()
    plt.subplots_adjust(top=0.85)

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close()


def run_all_experiments(output_dir: str = "results", random_state: int = 42) -> pd.DataFrame:
    """
    すべての実験を実行

    Parameters:
    -----------
    output_dir : str, default="results"
        結果の出力ディレクトリ
    random_state : int, default=42
        乱数シード

    Returns:
    --------
    summary : pandas.DataFrame
        データセット × M ごとのホールドアウト精度
    """
    os.makedirs(output_dir, exist_ok=True)

    experiments = [
        {
            'name': 'iris_like',
            'data_func': make_iris_like,
            'params': {'n_per_class': 50, 'random_state': random_state}
        },
        {
            'name': 'xor_3class',
            'data_func': make_xor_3class,
            'params': {'n_per_quadrant': 50, 'random_state': random_state}
        }
    ]

    summary = {}

    for exp in experiments:
        print(f"\n\n{'='*50}")
        print(f"Running experiment: {exp['name']}")
        print(f"{'='*50}")

        X, y = exp['data_func'](**exp['params'])
        results = run_product_size_comparison(exp['name'], X, y, output_dir=output_dir)

        summary[exp['name']] = {
            label: holdout['evaluation']['accuracy']
            for label, holdout in results['holdout'].items()
        }

    summary = pd.DataFrame(summary).T
    summary.to_csv(os.path.join(output_dir, "summary.csv"))

    plt.figure(figsize=(8, 4))
    sns.heatmap(summary, annot=True, fmt=".3f", cmap="YlGnBu")
    plt.title("Holdout Accuracy by Product Size")
    plt.tight_layout()
    plt.savefig(os.path.join(output_dir, "summary.png"), dpi=300, bbox_inches='tight')
    plt.close()

    return summary


if __name__ == "__main__":
    # すべての実験を実行
    run_all_experiments(output_dir="results", random_state=42)
