"""
Plotting functions for the regression lab.
"""
import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from typing import List
import io
import base64

from .series import ChartSeries


def _fig_to_base64(fig: plt.Figure) -> str:
    """Convert matplotlib figure to base64 string."""
    buf = io.BytesIO()
    fig.savefig(buf, format='png', bbox_inches='tight', dpi=100)
    buf.seek(0)
    img_str = base64.b64encode(buf.read()).decode('utf-8')
    plt.close(fig)
    return img_str


def plot_chart(
    series: ChartSeries,
    title: str = "Observed Data and Model Prediction",
    xlabel: str = "Input 1",
    ylabel: str = "Output"
) -> str:
    """
    Plot observed samples as bubbles and the predicted line.
    
    Args:
        series: Points ({x, y, r}) and predicted line ({x, y})
        title: Plot title
        xlabel: X-axis label
        ylabel: Y-axis label
    
    Returns:
        Base64-encoded PNG image
    """
    fig, ax = plt.subplots(figsize=(10, 6))
    
    if series.points:
        xs = [p['x'] for p in series.points]
        ys = [p['y'] for p in series.points]
        # scatter sizes are areas in points^2
        sizes = [np.pi * p['r'] ** 2 for p in series.points]
        ax.scatter(xs, ys, s=sizes, alpha=0.5, color='steelblue',
                   edgecolors='navy', label='Observed (size = |input 2|)')
    
    if series.predicted_line:
        ax.plot(
            [p['x'] for p in series.predicted_line],
            [p['y'] for p in series.predicted_line],
            'r-', lw=2, label='Predicted (input 2 = 0)'
        )
    
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    if series.points or series.predicted_line:
        ax.legend()
    ax.grid(True, alpha=0.3)
    
    return _fig_to_base64(fig)


def plot_learning_curve(
    losses: List[float],
    title: str = "Training Loss",
    xlabel: str = "Epoch",
    ylabel: str = "Loss (MSE)"
) -> str:
    """
    Plot the per-epoch training loss.
    
    Args:
        losses: Loss value per epoch
        title: Plot title
        xlabel: X-axis label
        ylabel: Y-axis label
    
    Returns:
        Base64-encoded PNG image
    """
    fig, ax = plt.subplots(figsize=(10, 4))
    
    epochs = range(1, len(losses) + 1)
    ax.plot(epochs, losses, 'b-', label='Training')
    
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)
    
    return _fig_to_base64(fig)
