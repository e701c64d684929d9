"""
Descriptive Statistics

Summary statistics over score series: central tendency, spread, quartiles,
and IQR outliers. Descriptive only; no hypothesis testing.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
from scipy import stats

from rehab_analytics import config
from rehab_analytics.utils import get_logger, InsufficientDataError

logger = get_logger(__name__)


@dataclass
class StatisticalSummary:
    """Descriptive summary of one numeric series."""
    count: int
    mean: float
    median: float
    standard_deviation: float
    variance: float
    min: float
    max: float
    range: float
    q1: float
    q2: float
    q3: float
    outliers: List[float] = field(default_factory=list)

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "standard_deviation": self.standard_deviation,
            "variance": self.variance,
            "min": self.min,
            "max": self.max,
            "range": self.range,
            "quartiles": {"q1": self.q1, "q2": self.q2, "q3": self.q3},
            "outliers": list(self.outliers),
        }


def _quartiles(ordered: np.ndarray) -> Tuple[float, float]:
    # Index-based: q1 = sorted[floor(0.25 n)], q3 = sorted[floor(0.75 n)]
    n = len(ordered)
    return float(ordered[int(np.floor(n * 0.25))]), float(ordered[int(np.floor(n * 0.75))])


def quartile_bounds(values: Sequence[float]) -> Tuple[float, float]:
    """Lower/upper Tukey fences for ``values``."""
    q1, q3 = _quartiles(np.sort(np.asarray(values, dtype=float)))
    spread = config.IQR_OUTLIER_FACTOR * (q3 - q1)
    return q1 - spread, q3 + spread


def calculate_basic_statistics(values: Sequence[float]) -> StatisticalSummary:
    """
    Compute a descriptive summary of ``values``.

    Variance and standard deviation use the sample (n - 1) denominator and
    are 0 for a single value. Results are rounded to 3 decimals; min, max
    and outliers are reported as given.

    Raises:
        InsufficientDataError: ``values`` is empty.
    """
    if len(values) == 0:
        raise InsufficientDataError(
            "Cannot compute statistics over an empty series",
            required=1,
            actual=0,
        )

    arr = np.asarray(values, dtype=float)
    n = arr.size
    ordered = np.sort(arr)

    if n > 1:
        desc = stats.describe(arr)
        mean = float(desc.mean)
        variance = float(desc.variance)
    else:
        mean = float(arr[0])
        variance = 0.0

    median = float(np.median(arr))
    q1, q3 = _quartiles(ordered)
    lower, upper = quartile_bounds(arr)
    outliers = [float(v) for v in arr if v < lower or v > upper]

    if outliers:
        logger.debug(f"calculate_basic_statistics: {len(outliers)} outlier(s) outside [{lower:.3f}, {upper:.3f}]")

    return StatisticalSummary(
        count=int(n),
        mean=round(mean, 3),
        median=round(median, 3),
        standard_deviation=round(float(np.sqrt(variance)), 3),
        variance=round(variance, 3),
        min=float(ordered[0]),
        max=float(ordered[-1]),
        range=round(float(ordered[-1] - ordered[0]), 3),
        q1=round(q1, 3),
        q2=round(median, 3),
        q3=round(q3, 3),
        outliers=outliers,
    )
