"""
モデルの保存・デバッグ出力・ユーティリティ・実験スクリプトのテスト
"""

import os
import json

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from mhboost import AdaBoostMH
from mhboost.data.synthetic import make_iris_like, make_xor_3class, make_separable_1d
from mhboost.utils.model_interface import (
    split_train_test,
    evaluate_model_interface,
    compare_product_sizes
)
from mhboost.utils.visualization import (
    create_results_directory,
    save_experiment_config,
    history_to_frame,
    plot_training_history,
    plot_feature_importance,
    plot_product_size_comparison,
    save_results_table
)
from mhboost.experiments.run_mhboost import train as run_mhboost
from mhboost.experiments.compare_product_sizes import run_product_size_comparison


@pytest.fixture
def trained_model():
    X, y = make_xor_3class(n_per_quadrant=10, random_state=0)
    return AdaBoostMH(n_iterations=5, product_size=3).fit(X, y), X


def test_save_and_load_model(tmp_path, trained_model):
    model, X = trained_model
    path = str(tmp_path / "model.json")

    model.save_model(path)
    loaded = AdaBoostMH.load_model(path)

    np.testing.assert_array_equal(loaded.predict_proba(X), model.predict_proba(X))
    np.testing.assert_array_equal(loaded.predict(X), model.predict(X))
    assert loaded.get_params() == model.get_params()

    # a loaded ensemble is closed for training
    with pytest.raises(RuntimeError):
        loaded.step()


def test_load_model_rejects_unknown_format(trained_model):
    model, _ = trained_model
    data = model.to_dict()

    data['format_version'] = 99
    with pytest.raises(ValueError, match="format version"):
        AdaBoostMH.from_dict(data)

    data = model.to_dict()
    data['learners'][0]['learner_type'] = "Tree"
    with pytest.raises(ValueError, match="Unknown learner type"):
        AdaBoostMH.from_dict(data)


def test_infinite_thresholds_survive_json(tmp_path):
    X = np.full((6, 1), 7.0)
    y = np.array(['A', 'B'] * 3)
    model = AdaBoostMH(n_iterations=1, product_size=1).fit(X, y)
    path = str(tmp_path / "model.json")

    model.save_model(path)
    loaded = AdaBoostMH.load_model(path)

    assert np.isinf(loaded.learners[0].base_learners[0].threshold)


def test_debug_dumps(tmp_path):
    X, y = make_separable_1d()
    AdaBoostMH(n_iterations=2, product_size=1, debug=True, debug_dir=str(tmp_path)).fit(X, y)

    labels_text = (tmp_path / "labels.txt").read_text()
    assert "Labels after initialization" in labels_text
    assert "1        -1        " in labels_text

    weights_text = (tmp_path / "weights.txt").read_text()
    assert "Iteration 0" in weights_text
    assert "Iteration 1" in weights_text
    assert "0.0833333333" in weights_text


def test_learner_logs_json(tmp_path, trained_model, capsys):
    model, _ = trained_model
    path = str(tmp_path / "logs.json")

    model.save_logs_to_json(path)

    with open(path) as f:
        logs = json.load(f)

    assert len(logs) == len(model.learners)
    assert logs[0]['iteration'] == 0
    assert 'timestamp' in logs[0]
    assert logs[0]['learner_type'] == "ProductLearner"
    assert "Learner logs saved to" in capsys.readouterr().out


def test_split_train_test():
    X, y = make_iris_like(n_per_class=10)
    X_train, y_train, X_test, y_test = split_train_test(X, y, test_size=0.2, random_state=0)

    assert X_train.shape == (24, 4)
    assert X_test.shape == (6, 4)
    assert len(y_train) == 24
    assert len(y_test) == 6


def test_evaluate_model_interface():
    X, y = make_iris_like(n_per_class=20, random_state=1)
    results = evaluate_model_interface(X, y, model_params={'n_iterations': 5, 'product_size': 2})

    assert results['model_class'] == "AdaBoostMH"
    assert results['n_learners'] == 5
    assert 0.0 <= results['evaluation']['accuracy'] <= 1.0
    assert results['evaluation']['log_loss'] >= 0.0


def test_compare_product_sizes():
    X, y = make_xor_3class(n_per_quadrant=25, random_state=0)
    results = compare_product_sizes(X, y, product_sizes=(1, 3), n_iterations=1)

    assert set(results.keys()) == {"M=1", "M=3"}
    assert results["M=3"]['first_energy'] < results["M=1"]['first_energy']
    assert results["M=1"]['mean_stumps'] == 1.0


def test_visualization_outputs(tmp_path, trained_model):
    model, _ = trained_model

    results_dir = create_results_directory(str(tmp_path))
    assert os.path.isdir(os.path.join(results_dir, "figures"))
    assert os.path.isdir(os.path.join(results_dir, "models"))

    save_experiment_config({'n_iterations': 5}, results_dir)
    with open(os.path.join(results_dir, "experiment_config.json")) as f:
        assert json.load(f) == {'n_iterations': 5}

    history = history_to_frame(model)
    assert list(history.columns) == ['alpha', 'energy', 'n_stumps', 'z_norm', 'weight_sum']
    assert len(history) == 5

    history_path = os.path.join(results_dir, "figures", "history.png")
    importance_path = os.path.join(results_dir, "figures", "importance.png")
    plot_training_history(model, save_path=history_path)
    plot_feature_importance(model, save_path=importance_path)

    assert os.path.isfile(history_path)
    assert os.path.isfile(importance_path)


def test_comparison_table_and_plot(tmp_path):
    results = {
        "M=1": {'product_size': 1, 'train_time': 0.1, 'n_learners': 3,
                'first_energy': 0.9, 'mean_stumps': 1.0, 'train_accuracy': 0.6},
        "M=3": {'product_size': 3, 'train_time': 0.2, 'n_learners': 3,
                'first_energy': 0.7, 'mean_stumps': 2.5, 'train_accuracy': 0.8}
    }
    table_path = str(tmp_path / "table.csv")
    plot_path = str(tmp_path / "comparison.png")

    df = save_results_table(results, table_path)
    plot_product_size_comparison(results, save_path=plot_path)

    assert list(df.index) == ["M=1", "M=3"]
    assert pd.read_csv(table_path, index_col=0).loc["M=3", 'first_energy'] == pytest.approx(0.7)
    assert os.path.isfile(plot_path)


def test_run_mhboost_cli(tmp_path):
    data = make_iris_like(n_per_class=15, random_state=0, as_frame=True)
    csv_path = str(tmp_path / "iris.csv")
    data.to_csv(csv_path, index=False)
    output_dir = tmp_path / "out"

    model = run_mhboost([
        '--input', csv_path,
        '--class-column', 'class',
        '-I', '5',
        '-M', '2',
        '--test-size', '0.2',
        '--output-dir', str(output_dir),
        '--save-model'
    ])

    assert len(model.learners) == 5
    assert model.n_classes == 3

    (experiment_dir,) = list(output_dir.iterdir())
    assert (experiment_dir / "experiment_config.json").is_file()
    assert (experiment_dir / "learner_logs.json").is_file()
    assert (experiment_dir / "models" / "adaboost_mh.json").is_file()
    assert (experiment_dir / "figures" / "training_history.png").is_file()


def test_product_size_experiment(tmp_path):
    X, y = make_xor_3class(n_per_quadrant=10, random_state=0)
    results = run_product_size_comparison("xor", X, y, product_sizes=(1, 2),
                                          n_iterations=3, output_dir=str(tmp_path))

    assert set(results['holdout'].keys()) == {"M=1", "M=2"}
    assert (tmp_path / "xor_product_sizes.json").is_file()
    assert (tmp_path / "xor_product_sizes.csv").is_file()
    assert (tmp_path / "xor_holdout.png").is_file()
