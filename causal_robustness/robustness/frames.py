"""Normalisation of observation inputs into DataFrames."""

from collections.abc import Mapping
from typing import Any, Iterable, Union

import numpy as np
import pandas as pd

Observations = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


def as_frame(observations: Observations) -> pd.DataFrame:
    """Convert records or a DataFrame into a frame with a positional index."""
    if isinstance(observations, pd.DataFrame):
        return observations.reset_index(drop=True)

    records = list(observations)
    for position, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise TypeError(
                f"Observation {position} is {type(record).__name__}, expected a mapping"
            )
    return pd.DataFrame.from_records(records)


def numeric_column(frame: pd.DataFrame, variable: str) -> pd.Series:
    """Numeric view of one column; non-numeric or absent values become NaN."""
    if variable not in frame.columns:
        return pd.Series(np.nan, index=frame.index, dtype=float, name=variable)
    column = pd.to_numeric(frame[variable], errors="coerce").astype(float)
    return column.where(np.isfinite(column))
