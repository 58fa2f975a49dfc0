"""
Tests for the shared module.
"""
import pytest
import numpy as np
import base64
import logging
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'regression_lab'))

from dataset_app.services import Sample
from shared.preprocess.scaler import MinMaxScaler
from shared.metrics.regression import mae, mse, rmse, r2_score, regression_report
from shared.utils.timer import Timer
from shared.utils.exceptions import (
    RegressionLabError,
    DataError,
    ValidationError,
    TrainingError,
    InsufficientDataError,
    InferenceError,
    ModelNotReadyError,
)
from shared.visualize import (
    ChartSeries,
    bubble_radius,
    scatter_series,
    predicted_line_series,
    project_chart,
    plot_chart,
    plot_learning_curve,
)


def make_samples(rows):
    return [Sample(*row) for row in rows]


class TestMinMaxScaler:
    """Tests for the min-max scaler."""

    def test_fit_transform(self):
        X = np.array([[1, 10], [3, 20], [5, 30]])

        X_scaled = MinMaxScaler().fit_transform(X)

        assert np.allclose(X_scaled.min(axis=0), 0)
        assert np.allclose(X_scaled.max(axis=0), 1)

    def test_inverse_transform(self):
        X = np.array([[1.0, -2.0], [3.0, 4.0], [5.0, 6.0]])
        scaler = MinMaxScaler()

        X_restored = scaler.inverse_transform(scaler.fit_transform(X))

        assert np.allclose(X, X_restored)

    def test_constant_column(self):
        """A constant column maps to the lower bound instead of dividing by zero."""
        X = np.array([[2.0, 1.0], [2.0, 5.0]])

        X_scaled = MinMaxScaler().fit_transform(X)

        assert np.allclose(X_scaled[:, 0], 0)
        assert np.all(np.isfinite(X_scaled))

    def test_one_dimensional_input(self):
        scaler = MinMaxScaler().fit(np.array([0.0, 5.0, 10.0]))
        assert np.allclose(scaler.transform(np.array([[5.0]])), 0.5)

    def test_serialization(self):
        X = np.array([[1, 2], [3, 4], [5, 6]])
        scaler = MinMaxScaler().fit(X)

        restored = MinMaxScaler.from_dict(scaler.to_dict())

        assert restored.fitted
        assert np.allclose(scaler.transform(X), restored.transform(X))

    def test_not_fitted(self):
        with pytest.raises(ValueError):
            MinMaxScaler().transform(np.array([[1.0]]))


class TestMetrics:
    """Tests for regression metrics."""

    def test_regression_metrics(self):
        y_true = np.array([1, 2, 3, 4, 5])
        y_pred = np.array([1.1, 2.2, 2.9, 4.1, 4.9])

        assert mae(y_true, y_pred) == pytest.approx(0.12)
        assert mse(y_true, y_pred) == pytest.approx(0.016)
        assert rmse(y_true, y_pred) == pytest.approx(np.sqrt(0.016))
        assert r2_score(y_true, y_pred) == pytest.approx(0.992)

    def test_perfect_fit(self):
        report = regression_report([1, 2, 3], [1, 2, 3])
        assert report == {'mae': 0.0, 'mse': 0.0, 'rmse': 0.0, 'r2': 1.0}

    def test_constant_targets(self):
        assert r2_score([2, 2, 2], [1, 2, 3]) == 0.0

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            mae([1, 2, 3], [1, 2])


class TestChartSeries:
    """Tests for the scatter and predicted line projections."""

    def test_bubble_radius(self):
        assert bubble_radius(0) == 5
        assert bubble_radius(3) == 11
        assert bubble_radius(-3) == 11
        assert bubble_radius(0.5) == 6

    def test_scatter_series(self):
        samples = make_samples([(1, -2, 3), (4, 0, 6)])

        assert scatter_series(samples) == [
            {'x': 1, 'y': 3, 'r': 9},
            {'x': 4, 'y': 6, 'r': 5},
        ]

    def test_predicted_line_spans_domain(self):
        samples = make_samples([(4, 1, 0), (-1, 2, 0), (9, 3, 0)])
        calls = []

        def predictor(x, y):
            calls.append(y)
            return 2 * x

        line = predicted_line_series(samples, predictor)

        assert len(line) == 21
        assert line[0]['x'] == pytest.approx(-1)
        assert line[-1]['x'] == pytest.approx(9)
        assert line[1]['x'] == pytest.approx(-0.5)
        assert all(p['y'] == pytest.approx(2 * p['x']) for p in line)
        assert set(calls) == {0.0}

    def test_single_input1_collapses(self):
        """When every sample shares input1 all 21 points sit on that x."""
        samples = make_samples([(5, 0, 1), (5, 3, 2)])

        line = predicted_line_series(samples, lambda x, y: 1.0)

        assert len(line) == 21
        assert all(p['x'] == 5.0 for p in line)

    def test_no_model_or_no_data(self):
        samples = make_samples([(1, 2, 3)])

        assert predicted_line_series(samples, None) == []
        assert predicted_line_series([], lambda x, y: 0.0) == []

    def test_failed_points_are_omitted(self, caplog):
        samples = make_samples([(0, 0, 0), (20, 0, 0)])

        def predictor(x, y):
            if x == 0:
                raise RuntimeError('network error')
            if x == 1:
                return float('nan')
            return x

        with caplog.at_level(logging.WARNING):
            line = predicted_line_series(samples, predictor)

        assert len(line) == 19
        assert 0.0 not in [p['x'] for p in line]
        assert 'Omitting predicted point' in caplog.text

    def test_project_chart(self):
        samples = make_samples([(1, 1, 1), (2, 2, 2)])

        chart = project_chart(samples, lambda x, y: x)
        data = chart.to_dict()

        assert len(data['points']) == 2
        assert len(data['predictedLine']) == 21
        assert project_chart([]) == ChartSeries()


class TestPlots:
    """Tests for the chart renderers."""

    def _is_png(self, encoded):
        return base64.b64decode(encoded).startswith(b'\x89PNG')

    def test_plot_chart(self):
        samples = make_samples([(1, 1, 1), (2, -2, 2)])
        assert self._is_png(plot_chart(project_chart(samples, lambda x, y: x)))

    def test_plot_empty_chart(self):
        assert self._is_png(plot_chart(ChartSeries()))

    def test_plot_learning_curve(self):
        assert self._is_png(plot_learning_curve([0.5, 0.25, 0.1]))


class TestUtils:
    """Tests for utility functions."""

    def test_timer(self):
        import time

        with Timer("test", log=False) as t:
            time.sleep(0.01)

        assert t.elapsed >= 0.01

    def test_timer_on_error(self):
        with pytest.raises(RuntimeError):
            with Timer("failing", log=False) as t:
                raise RuntimeError("stop")

        assert t.elapsed is not None

    def test_exception_hierarchy(self):
        assert issubclass(ValidationError, DataError)
        assert issubclass(InsufficientDataError, TrainingError)
        assert issubclass(ModelNotReadyError, InferenceError)
        for exc in (DataError, TrainingError, InferenceError):
            assert issubclass(exc, RegressionLabError)

        with pytest.raises(TrainingError):
            raise InsufficientDataError("Add at least 4 data points")
