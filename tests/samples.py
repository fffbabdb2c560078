"""Arrays shared by the property-style tests."""

SAMPLES = [
    [5],
    [3, 1],
    [1, 2],
    [4, 2, 7, 1],
    [5, 5, 5],
    [9, 8, 7, 6, 5, 4, 3, 2, 1],
    [1, 2, 3, 4, 5, 6, 7, 8],
    [3, -1, 2.5, 0, -7, 3],
    [2, 1, 2, 1, 2, 1, 2],
    [38, 27, 43, 3, 9, 82, 10, 15, 64, 1, 77, 20, 5, 5, 91, 0, 33, 12, 49, 8],
]
