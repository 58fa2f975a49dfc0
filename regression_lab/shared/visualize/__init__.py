"""
Visualization module for the regression lab.
Derives chart series and renders them with matplotlib.
"""
from .series import (
    ChartSeries,
    PREDICTED_LINE_POINTS,
    bubble_radius,
    scatter_series,
    predicted_line_series,
    project_chart,
)
from .plots import plot_chart, plot_learning_curve

__all__ = [
    'ChartSeries',
    'PREDICTED_LINE_POINTS',
    'bubble_radius',
    'scatter_series',
    'predicted_line_series',
    'project_chart',
    'plot_chart',
    'plot_learning_curve',
]
