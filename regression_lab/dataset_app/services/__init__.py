from .dataset_store import (
    DatasetStore,
    DatasetStats,
    ImportResult,
    Sample,
    NO_DATA,
    CSV_HEADER,
    parse_number,
)

__all__ = [
    'DatasetStore',
    'DatasetStats',
    'ImportResult',
    'Sample',
    'NO_DATA',
    'CSV_HEADER',
    'parse_number',
]
