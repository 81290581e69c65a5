from __future__ import annotations

import numpy as np

from .errors import ShapeMismatch
from .types import GridDescriptor


class TensorIndexer:
    """
    Index into a channel-major (CHW per anchor) grid detector output.

    Each anchor owns `bb_length = 5 + class_count` channels; every channel is a
    row-major `grid_height x grid_width` plane:

        [tx, ty, tw, th, tc, class_0 ... class_{C-1}]  (anchor 0)
        [tx, ty, tw, th, tc, class_0 ... class_{C-1}]  (anchor 1)
        ...
    """

    def __init__(self, grid: GridDescriptor):
        self.grid = grid

    def offset(self, anchor: int, channel: int, cy: int, cx: int) -> int:
        g = self.grid
        if not (0 <= anchor < g.anchor_count and 0 <= channel < g.bb_length):
            raise IndexError(f"anchor/channel out of range: ({anchor}, {channel})")
        if not (0 <= cy < g.grid_height and 0 <= cx < g.grid_width):
            raise IndexError(f"cell out of range: (cy={cy}, cx={cx})")

        stride = g.channel_stride
        anchor_base = stride * g.bb_length * anchor
        return anchor_base + stride * channel + cy * g.grid_width + cx

    def validate(self, tensor) -> np.ndarray:
        """
        Flatten `tensor` to 1-D float32 and check its length against the grid.
        """

        flat = np.asarray(tensor, dtype=np.float32).reshape(-1)
        if flat.size != self.grid.expected_length:
            raise ShapeMismatch(self.grid.expected_length, flat.size)
        return flat

    def as_grid(self, tensor) -> np.ndarray:
        # (anchor, channel, row, col)
        g = self.grid
        flat = self.validate(tensor)
        return flat.reshape(g.anchor_count, g.bb_length, g.grid_height, g.grid_width)

    def channel_view(self, tensor, anchor: int, channel: int) -> np.ndarray:
        start = self.offset(anchor, channel, 0, 0)
        flat = self.validate(tensor)
        return flat[start : start + self.grid.channel_stride].reshape(self.grid.grid_height, self.grid.grid_width)
