"""
In-memory dataset of (input1, input2, output) samples.

The store is the only owner of the sample list. Everything else reads
immutable snapshots (tuples of frozen Sample objects), so a training run
that took a snapshot is unaffected by later additions or a clear.
"""
import math
import threading
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from shared.utils import get_logger
from shared.utils.exceptions import ValidationError, EmptyDatasetError

logger = get_logger(__name__)

COLUMNS = ['input1', 'input2', 'output']
CSV_HEADER = ','.join(COLUMNS)


def parse_number(value: Any, name: str = 'value') -> float:
    """
    Convert a form or CSV value to a finite float.
    
    Args:
        value: Number or numeric string
        name: Field name used in the error message
    
    Returns:
        The parsed float
    
    Raises:
        ValidationError: If the value is missing, not numeric, NaN or infinite
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{name} must be a finite number")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValidationError(f"{name} must be a finite number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a finite number, got {value!r}")
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be a finite number, got {value!r}")
    return number


@dataclass(frozen=True)
class Sample:
    """One observed data point."""
    input1: float
    input2: float
    output: float
    
    @property
    def inputs(self) -> Tuple[float, float]:
        return (self.input1, self.input2)
    
    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class DatasetStats:
    """Summary of the output column. Mean and std are None when there is no data."""
    count: int
    mean_output: Optional[float]
    std_output: Optional[float]
    
    @property
    def has_data(self) -> bool:
        return self.count > 0
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'count': self.count,
            'mean_output': self.mean_output,
            'std_output': self.std_output,
        }


NO_DATA = DatasetStats(count=0, mean_output=None, std_output=None)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a CSV import. Skipped rows are counted, never fatal."""
    added: int
    skipped: int


class DatasetStore:
    """
    Ordered, append-only collection of samples.
    
    Mutations (add, clear, import) notify subscribers once the change is
    in place. Duplicates are allowed.
    """
    
    def __init__(self):
        self._samples: List[Sample] = []
        self._lock = threading.RLock()
        self._listeners: List[Callable[[], None]] = []
    
    def subscribe(self, callback: Callable[[], None]) -> None:
        """Register a callback invoked after every change."""
        self._listeners.append(callback)
    
    def _changed(self) -> None:
        for callback in list(self._listeners):
            callback()
    
    def __len__(self) -> int:
        return self.count()
    
    def count(self) -> int:
        with self._lock:
            return len(self._samples)
    
    def samples(self) -> Tuple[Sample, ...]:
        """Snapshot of all samples in insertion order."""
        with self._lock:
            return tuple(self._samples)
    
    def add(self, input1: Any, input2: Any, output: Any) -> Sample:
        """
        Append one sample.
        
        Raises:
            ValidationError: If any value is not a finite number; the
                dataset is left unchanged.
        """
        sample = Sample(
            input1=parse_number(input1, 'input1'),
            input2=parse_number(input2, 'input2'),
            output=parse_number(output, 'output'),
        )
        with self._lock:
            self._samples.append(sample)
            count = len(self._samples)
        
        logger.info(f"Added sample {count}: inputs [{sample.input1}, {sample.input2}], output {sample.output}")
        self._changed()
        return sample
    
    def clear(self) -> None:
        """Remove every sample."""
        with self._lock:
            removed = len(self._samples)
            self._samples = []
        
        logger.info(f"Cleared dataset ({removed} samples removed)")
        self._changed()
    
    def import_csv(self, text: str) -> ImportResult:
        """
        Append samples parsed from CSV text.
        
        The first line is a header and is skipped without inspection.
        Blank lines are ignored. A row with fewer than three fields or a
        field that is not a finite number is skipped and counted; fields
        after the third are ignored. No quoting is supported.
        
        Args:
            text: CSV content, newline separated
        
        Returns:
            ImportResult with added and skipped row counts
        """
        lines = text.split('\n')
        parsed: List[Sample] = []
        skipped = 0
        
        for line_no, line in enumerate(lines[1:], start=2):
            if not line.strip():
                continue
            fields = line.split(',')
            if len(fields) < 3:
                logger.warning(f"Skipping CSV line {line_no}: expected 3 fields, got {len(fields)}")
                skipped += 1
                continue
            try:
                values = [parse_number(f, col) for f, col in zip(fields[:3], COLUMNS)]
            except ValidationError as e:
                logger.warning(f"Skipping CSV line {line_no}: {e}")
                skipped += 1
                continue
            parsed.append(Sample(*values))
        
        if parsed:
            with self._lock:
                self._samples.extend(parsed)
        
        logger.info(f"Imported CSV: {len(parsed)} added, {skipped} skipped")
        if parsed:
            self._changed()
        return ImportResult(added=len(parsed), skipped=skipped)
    
    def to_dataframe(self) -> pd.DataFrame:
        """Samples as a DataFrame with columns input1, input2, output."""
        rows = [[s.input1, s.input2, s.output] for s in self.samples()]
        return pd.DataFrame(rows, columns=COLUMNS, dtype=np.float64)
    
    def export_csv(self) -> str:
        """
        Serialize the dataset as CSV text.
        
        Header line, then one row per sample in insertion order, each
        terminated by a newline. Floats are written at full precision so
        the text imports back to the same values.
        """
        return self.to_dataframe().to_csv(index=False, lineterminator='\n')
    
    def stats(self) -> DatasetStats:
        """
        Count, mean and population standard deviation of the outputs.
        
        Returns NO_DATA when the dataset is empty.
        """
        samples = self.samples()
        if not samples:
            return NO_DATA
        
        outputs = np.array([s.output for s in samples], dtype=np.float64)
        return DatasetStats(
            count=len(samples),
            mean_output=float(np.mean(outputs)),
            std_output=float(np.std(outputs)),
        )
    
    def _input1_values(self) -> np.ndarray:
        samples = self.samples()
        if not samples:
            raise EmptyDatasetError("Dataset is empty")
        return np.array([s.input1 for s in samples], dtype=np.float64)
    
    def min_input1(self) -> float:
        return float(self._input1_values().min())
    
    def max_input1(self) -> float:
        return float(self._input1_values().max())
