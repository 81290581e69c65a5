from __future__ import annotations


class GridYoloError(Exception):
    """Base class for decode pipeline errors."""


class ShapeMismatch(GridYoloError, ValueError):
    """
    Raw output length does not match the shape implied by the grid descriptor.
    """

    def __init__(self, expected: int, actual: int):
        self.expected = int(expected)
        self.actual = int(actual)
        super().__init__(
            f"Raw output has {self.actual} values, expected {self.expected} "
            "(grid_width * grid_height * anchor_count * (5 + class_count))."
        )


class InvalidConfiguration(GridYoloError, ValueError):
    pass
