"""
実験結果の保存・可視化ユーティリティモジュール

このモジュールは、AdaBoost.MH の学習過程と実験結果を
保存・可視化するためのユーティリティ関数を提供します。
"""

import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
import os
import json
from typing import Dict, Optional, Any
import datetime


def create_results_directory(base_dir: str = "results") -> str:
    """
    実験結果を保存するディレクトリを作成

    Parameters:
    -----------
    base_dir : str, default="results"
        基本ディレクトリ名

    Returns:
    --------
    results_dir : str
        作成された結果ディレクトリのパス
    """
    # タイムスタンプを含むディレクトリ名を生成
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    results_dir = os.path.join(base_dir, f"experiment_{timestamp}")

    # ディレクトリを作成
    os.makedirs(results_dir, exist_ok=True)
    os.makedirs(os.path.join(results_dir, "figures"), exist_ok=True)
    os.makedirs(os.path.join(results_dir, "models"), exist_ok=True)

    return results_dir


def save_experiment_config(config: Dict, results_dir: str) -> None:
    """
    実験設定を保存

    Parameters:
    -----------
    config : dict
        実験設定
    results_dir : str
        結果ディレクトリのパス
    """
    with open(os.path.join(results_dir, "experiment_config.json"), 'w') as f:
        json.dump(config, f, indent=2, default=str)


def history_to_frame(model: Any) -> pd.DataFrame:
    """
    学習履歴を DataFrame に変換

    Parameters:
    -----------
    model : AdaBoostMH
        学習済みモデル

    Returns:
    --------
    history : pandas.DataFrame
        反復ごとの alpha / energy / n_stumps / z_norm / weight_sum
    """
    history = pd.DataFrame(model.history)
    history.index.name = 'iteration'
    return history


def plot_training_history(model: Any, title: str = "AdaBoost.MH Training History",
                          save_path: Optional[str] = None) -> None:
    """
    学習履歴をプロット

    Parameters:
    -----------
    model : AdaBoostMH
        学習済みモデル
    title : str, default="AdaBoost.MH Training History"
        プロットのタイトル
    save_path : str, optional
        保存先のパス
    """
    history = history_to_frame(model)

    fig, axes = plt.subplots(2, 2, figsize=(12, 10))
    fig.suptitle(title, fontsize=14)

    panels = [
        ('alpha', 'Alpha', axes[0, 0]),
        ('energy', 'Energy (Z)', axes[0, 1]),
        ('z_norm', 'Weight Normalization Factor', axes[1, 0]),
        ('n_stumps', 'Stumps per Learner', axes[1, 1])
    ]

    for column, label, ax in panels:
        ax.plot(history.index, history[column], marker='o')
        ax.set_title(label)
        ax.set_xlabel('Iteration')
        ax.grid(True, linestyle='--', alpha=0.7)

    plt.tight_layout()
    plt.subplots_adjust(top=0.92)

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close()


def plot_feature_importance(model: Any, title: str = "Feature Importance",
                            save_path: Optional[str] = None) -> None:
    """
    特徴量重要度をプロット

    Parameters:
    -----------
    model : AdaBoostMH
        学習済みモデル
    title : str, default="Feature Importance"
        プロットのタイトル
    save_path : str, optional
        保存先のパス
    """
    importance = model.get_feature_importance()
    names = model.feature_names or [f"x{j}" for j in range(len(importance))]
    df = pd.DataFrame({'feature': names, 'importance': importance})

    plt.figure(figsize=(10, 6))
    sns.barplot(data=df, x='importance', y='feature', color='steelblue')
    plt.title(title)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close()


def plot_product_size_comparison(results: Dict, title: str = "Product Size Comparison",
                                 save_path: Optional[str] = None) -> None:
    """
    積のサイズごとの比較結果をプロット

    Parameters:
    -----------
    results : dict
        compare_product_sizes の結果
    title : str, default="Product Size Comparison"
        プロットのタイトル
    save_path : str, optional
        保存先のパス
    """
    df = results_to_frame(results)[['train_accuracy', 'first_energy', 'mean_stumps', 'train_time']]

    plt.figure(figsize=(10, 6))
    sns.heatmap(df, annot=True, fmt=".4f", cmap="YlGnBu")
    plt.title(title)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close()


def results_to_frame(results: Dict) -> pd.DataFrame:
    """
    比較結果を DataFrame に変換
    """
    return pd.DataFrame.from_dict(results, orient='index')


def save_results_table(results: Dict, file_path: str) -> pd.DataFrame:
    """
    比較結果を CSV に保存

    Parameters:
    -----------
    results : dict
        比較結果
    file_path : str
        保存先のパス

    Returns:
    --------
    df : pandas.DataFrame
        保存した表
    """
    df = results_to_frame(results)
    df.to_csv(file_path)
    return df
