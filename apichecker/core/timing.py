"""Timing analyzer: flags response-time variance that may leak a branch taken."""

from dataclasses import dataclass
from statistics import fmean, pstdev
from typing import Dict, List, Sequence

# Coefficient of variation above which timing is considered leaky.
CV_THRESHOLD = 0.3


@dataclass(frozen=True)
class TimingStats:
    mean: float
    stdev: float
    samples: List[float]
    suspicious: bool

    @property
    def cv(self) -> float:
        return self.stdev / self.mean if self.mean else 0.0

    def as_dict(self) -> Dict[str, object]:
        return {
            "averageTime": f"{self.mean:.2f}ms",
            "standardDeviation": f"{self.stdev:.2f}ms",
            "timings": list(self.samples),
        }


def analyze(samples: Sequence[float], threshold: float = CV_THRESHOLD) -> TimingStats:
    """
    Mean and population standard deviation of *samples* (milliseconds).
    Suspicious iff stdev > threshold * mean.
    """
    values = [float(s) for s in samples]
    if not values:
        return TimingStats(0.0, 0.0, [], False)
    mean = fmean(values)
    stdev = pstdev(values, mu=mean)
    return TimingStats(mean, stdev, values, stdev > threshold * mean)
