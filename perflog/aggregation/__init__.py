from .rollup import TAG_DELIMITER, TagHierarchy
from .slicer import TimeSlicer

__all__ = ["TAG_DELIMITER", "TagHierarchy", "TimeSlicer"]
