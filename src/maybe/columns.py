"""Sketch polars columns.

Builds the three sketches over the values of dataframe columns in a single
pass, e.g. to profile a table that does not fit an exact ``n_unique``:

    frame = pl.scan_parquet("events.parquet")
    for name, sketch in sketch_frame(frame, columns=["user_id"]).items():
        print(name, sketch.distinct.cardinality())

Null values are counted but not added to any sketch. Temporal, decimal and
categorical columns are cast to strings first; nested columns (lists,
structs, arrays) have no byte representation and are rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

import polars as pl

from maybe.bloom import BloomFilter
from maybe.countmin import CountMinSketch
from maybe.errors import UnsupportedColumnError
from maybe.hyperloglog import HyperLogLog
from maybe.protocols import (
    BloomFilterConfig,
    CountMinSketchConfig,
    HyperLogLogConfig,
)

logger = logging.getLogger(__name__)

_NATIVE_DTYPES = (pl.String, pl.Binary, pl.Boolean)


@dataclass
class ColumnSketch:
    """Sketches of one column.

    Attributes:
        name: Column name
        rows: Number of rows seen, nulls included
        null_count: Number of null values
        distinct: Cardinality estimator over non-null values
        frequencies: Frequency estimator over non-null values
        membership: Membership tester over non-null values
    """

    name: str
    rows: int
    null_count: int
    distinct: HyperLogLog
    frequencies: CountMinSketch
    membership: BloomFilter

    def memory_bytes(self) -> int:
        return (
            self.distinct.memory_bytes()
            + self.frequencies.memory_bytes()
            + self.membership.memory_bytes()
        )

    def summary(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "rows": self.rows,
            "null_count": self.null_count,
            "approx_distinct": self.distinct.cardinality(),
            "memory_bytes": self.memory_bytes(),
        }


def _prepare(series: pl.Series) -> pl.Series:
    """Cast a column to a dtype whose values have a byte representation."""
    dtype = series.dtype
    if dtype.is_nested():
        raise UnsupportedColumnError(
            f"Cannot sketch nested column {series.name!r}",
            context={"column": series.name, "dtype": str(dtype)},
        )
    if dtype.is_integer() or dtype.is_float() or dtype in _NATIVE_DTYPES:
        return series
    return series.cast(pl.String)


def sketch_column(
    series: pl.Series,
    *,
    hll_config: HyperLogLogConfig | None = None,
    cms_config: CountMinSketchConfig | None = None,
    bloom_config: BloomFilterConfig | None = None,
) -> ColumnSketch:
    """Build sketches over a single column.

    Args:
        series: Column to sketch
        hll_config: HyperLogLog configuration (defaults if None)
        cms_config: Count-Min Sketch configuration (defaults if None)
        bloom_config: Bloom filter configuration (defaults if None)

    Returns:
        ColumnSketch for the column

    Raises:
        UnsupportedColumnError: If the column has a nested dtype
    """
    prepared = _prepare(series)

    distinct = HyperLogLog(hll_config)
    frequencies = CountMinSketch(cms_config)
    membership = BloomFilter(bloom_config)

    values = prepared.drop_nulls().to_list()
    distinct.add_batch(values)
    frequencies.add_batch(values)
    membership.add_batch(values)

    logger.debug(
        "Sketched column %r: %d rows, %d nulls",
        series.name,
        series.len(),
        series.null_count(),
    )

    return ColumnSketch(
        name=series.name,
        rows=series.len(),
        null_count=series.null_count(),
        distinct=distinct,
        frequencies=frequencies,
        membership=membership,
    )


def sketch_frame(
    frame: pl.DataFrame | pl.LazyFrame,
    columns: Sequence[str] | None = None,
    *,
    hll_config: HyperLogLogConfig | None = None,
    cms_config: CountMinSketchConfig | None = None,
    bloom_config: BloomFilterConfig | None = None,
) -> dict[str, ColumnSketch]:
    """Build sketches for several columns of a frame.

    Nested columns are skipped with a warning.

    Args:
        frame: Eager or lazy frame
        columns: Columns to sketch (all columns if None)
        hll_config: HyperLogLog configuration shared by every column
        cms_config: Count-Min Sketch configuration shared by every column
        bloom_config: Bloom filter configuration shared by every column

    Returns:
        Mapping of column name to ColumnSketch, in column order
    """
    if isinstance(frame, pl.LazyFrame):
        frame = frame.select(columns).collect() if columns else frame.collect()
    elif columns:
        frame = frame.select(columns)

    results: dict[str, ColumnSketch] = {}
    for series in frame.get_columns():
        try:
            results[series.name] = sketch_column(
                series,
                hll_config=hll_config,
                cms_config=cms_config,
                bloom_config=bloom_config,
            )
        except UnsupportedColumnError as e:
            logger.warning("Skipping column %r: %s", series.name, e.message)

    return results
