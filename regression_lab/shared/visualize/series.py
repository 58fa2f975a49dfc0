"""
Chart series derived from the dataset and the current model.

The chart shows two series: the observed samples as bubbles (x = input1,
y = output, radius encodes |input2|) and the model's predicted line,
sampled across the observed input1 domain with input2 pinned to 0.
Series are always recomputed from scratch, never patched.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from shared.utils import get_logger

logger = get_logger(__name__)

# 20 equal intervals across [min(input1), max(input1)]
PREDICTED_LINE_POINTS = 21

Predictor = Callable[[float, float], float]


def bubble_radius(input2: float) -> float:
    """Bubble size for a sample: grows linearly with the magnitude of input2."""
    return abs(input2) * 2 + 5


@dataclass(frozen=True)
class ChartSeries:
    """Observed points and predicted line, ready for a chart renderer."""
    points: List[Dict[str, float]] = field(default_factory=list)
    predicted_line: List[Dict[str, float]] = field(default_factory=list)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'points': list(self.points),
            'predictedLine': list(self.predicted_line),
        }


def scatter_series(samples: Sequence) -> List[Dict[str, float]]:
    """One {x, y, r} bubble per sample, in insertion order."""
    return [
        {'x': s.input1, 'y': s.output, 'r': bubble_radius(s.input2)}
        for s in samples
    ]


def predicted_line_series(
    samples: Sequence,
    predictor: Optional[Predictor],
    num_points: int = PREDICTED_LINE_POINTS
) -> List[Dict[str, float]]:
    """
    Sample the predictor across the observed input1 domain.
    
    Points where the predictor raises or returns a non-finite value are
    left out, so a partial line is possible. When every sample shares the
    same input1 all points collapse onto that x value.
    
    Args:
        samples: Observed samples (anything with input1/input2/output)
        predictor: Callable (input1, input2) -> output, or None if no model
        num_points: Number of evenly spaced x positions
    
    Returns:
        List of {x, y} points
    """
    if predictor is None or len(samples) < 1:
        return []
    
    inputs = np.array([s.input1 for s in samples], dtype=np.float64)
    xs = np.linspace(inputs.min(), inputs.max(), num_points)
    
    line = []
    for x in xs:
        x = float(x)
        try:
            y = float(predictor(x, 0.0))
        except Exception as e:
            logger.warning(f"Omitting predicted point at x={x}: {e}")
            continue
        if not math.isfinite(y):
            logger.warning(f"Omitting predicted point at x={x}: non-finite output {y}")
            continue
        line.append({'x': x, 'y': y})
    
    return line


def project_chart(samples: Sequence, predictor: Optional[Predictor] = None) -> ChartSeries:
    """Build both chart series from a dataset snapshot."""
    return ChartSeries(
        points=scatter_series(samples),
        predicted_line=predicted_line_series(samples, predictor),
    )
