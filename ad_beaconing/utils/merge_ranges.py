from typing import Iterable

from ad_beaconing.types.data_range import DataRange


def merge_ranges(ranges: Iterable[DataRange]) -> tuple[DataRange, ...]:
    """Sort by start and merge overlapping or touching ranges."""
    merged: list[DataRange] = []
    for data_range in sorted(ranges, key=lambda r: (r.start, r.end)):
        if merged and data_range.start <= merged[-1].end:
            if data_range.end > merged[-1].end:
                merged[-1] = DataRange(start=merged[-1].start, end=data_range.end)
        else:
            merged.append(data_range)
    return tuple(merged)


def find_containing(
    ranges: Iterable[DataRange], position: float
) -> DataRange | None:
    for data_range in ranges:
        if data_range.contains(position):
            return data_range
    return None
