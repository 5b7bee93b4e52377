"""
Cross-sample aggregation of per-sample values into summary statistics.
"""

import statistics
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar

from ..core.errors import InsufficientSamplesError, UndefinedStatisticError
from ..core.types import AnalysisKey
from ..formatters import format_seconds

SampleType = TypeVar('SampleType')


@dataclass(frozen=True)
class Summary:
    """
    Statistics over the samples that define a value, in seconds.

    `stdev` is the sample standard deviation (divisor n - 1). It is
    undefined for a single sample, and reading it then raises
    UndefinedStatisticError.
    """
    n: int
    mean: float
    min: float
    max: float
    stdev_or_none: Optional[float] = None

    @property
    def stdev(self) -> float:
        if self.stdev_or_none is None:
            raise UndefinedStatisticError(f"Standard deviation is undefined for n={self.n}")
        return self.stdev_or_none

    @classmethod
    def from_values(cls, values: Sequence[float]) -> 'Summary':
        """
        Summarize values.

        Raises:
            InsufficientSamplesError: If `values` is empty
        """
        n = len(values)
        if n == 0:
            raise InsufficientSamplesError("No samples have a value")
        mean = statistics.mean(values)
        stdev = statistics.stdev(values) if n >= 2 else None
        return cls(n=n, mean=mean, min=min(values), max=max(values), stdev_or_none=stdev)

    def to_dict(self) -> Dict[str, Any]:
        """
        Raw statistics for JSON serialization.

        Raises:
            UndefinedStatisticError: If stdev is undefined
        """
        return {
            'n': self.n,
            'mean': self.mean,
            'stdev': self.stdev,
            'min': self.min,
            'max': self.max,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Summary':
        return cls(
            n=data['n'],
            mean=data['mean'],
            min=data['min'],
            max=data['max'],
            stdev_or_none=data['stdev'],
        )

    def fmt_representative(self) -> str:
        return format_seconds(self.min)

    def fmt_full(self) -> str:
        return (
            f"n={self.n}, μ={format_seconds(self.mean)}, s={format_seconds(self.stdev)}, "
            f"min={format_seconds(self.min)}, max={format_seconds(self.max)}"
        )

    def __str__(self) -> str:
        return f"{self.fmt_representative()} ({self.fmt_full()})"


class Analysis(Generic[SampleType]):
    """Samples sharing one site, engine and CPU configuration."""

    def __init__(self, samples: Sequence[SampleType], key: Optional[AnalysisKey] = None):
        self._samples = tuple(samples)
        self.key = key

    @property
    def samples(self) -> Sequence[SampleType]:
        return self._samples

    def __len__(self) -> int:
        return len(self._samples)

    def values(self, projection: Callable[[SampleType], Optional[float]]) -> List[float]:
        """Apply `projection` to every sample, dropping samples where it is None."""
        result = []
        for sample in self._samples:
            value = projection(sample)
            if value is not None:
                result.append(value)
        return result

    def summary(self, projection: Callable[[SampleType], Optional[float]]) -> Summary:
        """
        Summarize `projection` across samples.

        Raises:
            InsufficientSamplesError: If no sample defines a value
        """
        return Summary.from_values(self.values(projection))
