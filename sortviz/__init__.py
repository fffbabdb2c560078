"""
sortviz package
===============

Step-recording merge sort and quick sort for the sorting visualizer.

- The instrumented algorithms are in `sortviz/merge_sort.py` and `sortviz/quick_sort.py`.
- Replay (seeking to any step) is in `sortviz/player.py`.
- Merge sort recursion tree reconstruction is in `sortviz/tree.py`.
- The Flask front end lives in the top-level `app.py`.
"""

from .errors import InternalConsistencyError, InvalidInputError, SortVizError
from .merge_sort import run_merge_sort
from .quick_sort import run_quick_sort
from .trace import AlgorithmKind, Counters, Trace

__version__ = "0.3.0"

__all__ = [
    "AlgorithmKind",
    "Counters",
    "InternalConsistencyError",
    "InvalidInputError",
    "SortVizError",
    "Trace",
    "run_merge_sort",
    "run_quick_sort",
]
