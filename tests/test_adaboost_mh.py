"""
AdaBoostMH（学習ループと分類器）のテスト
"""

import json

import numpy as np
import pandas as pd
import pytest

from mhboost import AdaBoostMH, ModelNotBuiltError, SingleStumpLearner, ProductLearner
from mhboost.data.synthetic import (
    make_separable_1d,
    make_iris_like,
    make_xor_3class,
    make_constant_attribute,
    make_degenerate_class
)


def all_stumps(model):
    for learner in model.learners:
        if isinstance(learner, ProductLearner):
            yield from learner.base_learners
        else:
            yield learner


def test_separable_single_stump():
    X, y = make_separable_1d()
    model = AdaBoostMH(n_iterations=1, product_size=1).fit(X, y)

    assert len(model.learners) == 1
    stump = model.learners[0].base_learners[0]
    assert stump.selected_attr == 0
    assert 2.0 < stump.threshold < 3.0
    # class A is voted on the negative side, class B on the positive side
    np.testing.assert_array_equal(stump.vote_vector, [-1.0, 1.0])

    p_low = model.distribution_for_instance([2.5])
    p_high = model.distribution_for_instance([3.5])
    assert p_low[0] > p_low[1]
    assert p_high[1] > p_high[0]
    np.testing.assert_array_equal(model.predict([[0.0], [5.0]]), ['A', 'B'])


def test_iris_like_training():
    X, y = make_iris_like(n_per_class=50, random_state=0)
    model = AdaBoostMH(n_iterations=10, product_size=1)
    model.initialize(X, y)

    sorted_before = model.table.sorted_indices.copy()

    while True:
        labels_before = model.table.labels.tobytes()
        if not model.step():
            break
        # weights stay normalized and labels are untouched by the step
        assert model.table.sum_weights() == pytest.approx(1.0, abs=1e-6)
        assert model.table.labels.tobytes() == labels_before
    model.finish()

    assert model.n_iterations_performed == 10
    np.testing.assert_array_equal(model.table.sorted_indices, sorted_before)
    for stump in all_stumps(model):
        assert set(np.unique(stump.vote_vector)) <= {-1.0, 1.0}

    assert model.evaluate(X, y)['accuracy'] > 0.9


def test_weight_sum_history():
    X, y = make_xor_3class(n_per_quadrant=20, random_state=1)
    model = AdaBoostMH(n_iterations=15, product_size=3).fit(X, y)

    np.testing.assert_allclose(model.history['weight_sum'], 1.0, atol=1e-6)
    assert len(model.history['alpha']) == model.n_iterations_performed


def test_degenerate_class():
    X, y = make_degenerate_class(n_samples=30)
    model = AdaBoostMH(n_iterations=5, product_size=2).fit(X, y)

    assert model.n_classes == 3
    assert not np.any(np.isnan(model.table.weights))

    probabilities = model.predict_proba(X)
    assert not np.any(np.isnan(probabilities))
    assert np.all(probabilities[:, 0] > 0.99)
    np.testing.assert_array_equal(model.predict(X[:3]), ['A', 'A', 'A'])


def test_constant_attribute_stops_after_first_learner():
    X, y = make_constant_attribute(n_samples=10)
    model = AdaBoostMH(n_iterations=10, product_size=3).fit(X, y)

    assert len(model.learners) == 1
    assert model.learners[0].alpha == pytest.approx(0.0)
    for stump in all_stumps(model):
        assert np.isinf(stump.threshold)

    probabilities = model.predict_proba(X)
    np.testing.assert_allclose(probabilities, 0.5)


def test_constant_attribute_without_early_stop():
    X, y = make_constant_attribute(n_samples=10)
    model = AdaBoostMH(n_iterations=4, product_size=3, stop_on_zero_edge=False).fit(X, y)

    assert len(model.learners) == 4
    assert all(learner.alpha == pytest.approx(0.0) for learner in model.learners)


def test_product_lowers_first_energy_on_xor():
    X, y = make_xor_3class(n_per_quadrant=25, random_state=0)
    single = AdaBoostMH(n_iterations=1, product_size=1).fit(X, y)
    product = AdaBoostMH(n_iterations=1, product_size=3).fit(X, y)

    assert product.history['energy'][0] < single.history['energy'][0]


def test_deterministic_training():
    X, y = make_iris_like(n_per_class=20, random_state=3)
    first = AdaBoostMH(n_iterations=8, product_size=3).fit(X, y)
    second = AdaBoostMH(n_iterations=8, product_size=3).fit(X, y)

    assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())


def test_fit_matches_manual_stepping():
    X, y = make_xor_3class(n_per_quadrant=15, random_state=2)
    fitted = AdaBoostMH(n_iterations=6, product_size=2).fit(X, y)

    stepped = AdaBoostMH(n_iterations=6, product_size=2)
    stepped.initialize(X, y)
    while stepped.step():
        pass
    stepped.finish()

    assert json.dumps(fitted.to_dict()) == json.dumps(stepped.to_dict())


def test_distribution_properties():
    X, y = make_xor_3class(n_per_quadrant=10, random_state=4)
    model = AdaBoostMH(n_iterations=30, product_size=3).fit(X, y)

    probabilities = model.predict_proba(X)
    assert probabilities.shape == (X.shape[0], 3)
    assert np.all(probabilities >= 0)
    np.testing.assert_allclose(probabilities.sum(axis=1), 1.0, atol=1e-9)

    scores = model.decision_function(X)
    np.testing.assert_array_equal(np.argmax(scores, axis=1), np.argmax(probabilities, axis=1))

    distribution = model.distribution_for_instance(X[0], n_classes=3)
    np.testing.assert_allclose(distribution, probabilities[0])
    with pytest.raises(ValueError):
        model.distribution_for_instance(X[0], n_classes=4)


def test_large_scores_do_not_overflow():
    X, y = make_separable_1d()
    model = AdaBoostMH(n_iterations=300, product_size=1).fit(X, y)

    probabilities = model.predict_proba(X)
    assert np.all(np.isfinite(probabilities))
    np.testing.assert_allclose(probabilities.sum(axis=1), 1.0)


def test_single_stump_mode():
    X, y = make_iris_like(n_per_class=20, random_state=0)
    model = AdaBoostMH(n_iterations=5, use_product=False).fit(X, y)

    assert all(isinstance(learner, SingleStumpLearner) for learner in model.learners)
    assert model.history['n_stumps'] == [1] * 5


def test_class_column_and_declared_categories():
    data = make_iris_like(n_per_class=10, random_state=0, as_frame=True)
    model = AdaBoostMH(n_iterations=3, product_size=2).fit(data, class_column='class')

    assert model.feature_names == ['sepal_length', 'sepal_width', 'petal_length', 'petal_width']
    assert list(model.classes_) == ['Iris-setosa', 'Iris-versicolor', 'Iris-virginica']

    predictions = model.predict(data.drop(columns=['class']))
    assert set(predictions) <= set(model.classes_)


def test_missing_class_rows_are_dropped():
    X = np.array([[0.0], [1.0], [2.0], [3.0], [4.0]])
    y = np.array(['A', 'A', None, 'B', 'B'], dtype=object)
    model = AdaBoostMH(n_iterations=2, product_size=1).fit(X, y)

    assert model.table.n_instances == 4
    results = model.evaluate(X, y, metrics=['accuracy', 'error_rate', 'log_loss'])
    assert results['accuracy'] == pytest.approx(1.0)
    assert results['error_rate'] == pytest.approx(0.0)
    assert results['log_loss'] >= 0.0


def test_capability_check_errors():
    model = AdaBoostMH(n_iterations=2)

    with pytest.raises(ValueError):
        model.fit(pd.DataFrame({'x': ['a', 'b']}), ['A', 'B'])
    with pytest.raises(ValueError):
        model.fit(np.array([[0.0], [np.nan]]), ['A', 'B'])
    with pytest.raises(ValueError):
        model.fit(np.array([[0.0], [1.0]]), [0.5, 1.5])
    with pytest.raises(ValueError):
        model.fit(np.array([[0.0], [1.0]]), ['A', 'A'])
    with pytest.raises(ValueError):
        model.fit(np.array([[0.0], [1.0], [2.0]]), ['A', 'B'])


def test_empty_dataset_with_declared_classes():
    model = AdaBoostMH(n_iterations=5)
    model.initialize(np.empty((0, 2)), np.array([], dtype=object), classes=['A', 'B'])

    assert model.step() is False
    model.finish()
    assert model.learners == []
    with pytest.raises(ModelNotBuiltError):
        model.predict_proba(np.zeros((1, 2)))


def test_no_attributes_finishes_immediately():
    data = pd.DataFrame({'class': ['A', 'B', 'A']})
    model = AdaBoostMH(n_iterations=5).fit(data, class_column='class')

    assert model.n_attributes == 0
    assert model.learners == []


def test_step_lifecycle_errors():
    X, y = make_separable_1d()
    model = AdaBoostMH(n_iterations=2, product_size=1)

    with pytest.raises(RuntimeError):
        model.step()

    model.fit(X, y)
    with pytest.raises(RuntimeError):
        model.step()


def test_model_not_built():
    model = AdaBoostMH()

    with pytest.raises(ModelNotBuiltError, match="No model built"):
        model.predict(np.zeros((1, 1)))
    with pytest.raises(RuntimeError):
        model.distribution_for_instance([0.0])


def test_predict_rejects_wrong_feature_count():
    X, y = make_separable_1d()
    model = AdaBoostMH(n_iterations=1, product_size=1).fit(X, y)

    with pytest.raises(ValueError, match="features"):
        model.predict(np.zeros((2, 3)))


def test_params():
    model = AdaBoostMH(n_iterations=7, product_size=2)
    params = model.get_params()

    assert params['n_iterations'] == 7
    assert params['product_size'] == 2
    assert params['base_learner'] == "DecisionStump"

    model.set_params(n_iterations=3, verbose=True)
    assert model.n_iterations == 3
    assert model.verbose is True

    with pytest.raises(ValueError, match="Invalid parameter"):
        model.set_params(learning_rate=0.1)
    with pytest.raises(ValueError):
        model.set_params(product_size=0)
    with pytest.raises(ValueError):
        AdaBoostMH(n_iterations=0)
    with pytest.raises(ValueError):
        AdaBoostMH(base_learner="Tree")


def test_feature_importance():
    X = np.column_stack([np.zeros(6), np.arange(6, dtype=float)])
    y = np.array(['A', 'A', 'A', 'B', 'B', 'B'])
    model = AdaBoostMH(n_iterations=3, product_size=1).fit(X, y)

    np.testing.assert_allclose(model.get_feature_importance(), [0.0, 1.0])


def test_verbose_output(capsys):
    X, y = make_separable_1d()
    AdaBoostMH(n_iterations=2, product_size=2, verbose=True).fit(X, y)

    out = capsys.readouterr().out
    assert "Iteration 0 begins" in out
    assert "Iteration 1 begins" in out
    assert "Update Weights: Z = " in out
    assert "Amount of Base Learners:" in out


def test_training_summary_and_str(capsys):
    X, y = make_separable_1d()
    model = AdaBoostMH(n_iterations=2, product_size=3).fit(X, y)
    model.print_training_summary()

    out = capsys.readouterr().out
    assert "Iterations: 2/2" in out
    assert str(model) == "AdaBoostMH with 2 iterations and 3 products"
