"""Connected component extraction of difference regions."""
from __future__ import annotations

from typing import List

import numpy as np

from .types import DiffMask, Rect


def extract_diff_boxes(mask: DiffMask, min_area: int = 60) -> List[Rect]:
    """Return bounding boxes of the 4-connected components of ``mask``.

    Components whose bounding box covers fewer than ``min_area`` pixels are
    dropped. The flood fill keeps its own stack so page sized masks do not
    hit the recursion limit. Box order follows the scan and carries no
    meaning.
    """

    if mask.size == 0:
        return []
    height, width = mask.shape
    flat = bytearray(np.ascontiguousarray(mask, dtype=np.uint8).tobytes())
    visited = bytearray(len(flat))
    boxes: List[Rect] = []

    for start in np.flatnonzero(mask).tolist():
        if visited[start]:
            continue
        visited[start] = 1
        stack = [start]
        min_x = max_x = start % width
        min_y = max_y = start // width

        while stack:
            current = stack.pop()
            cy, cx = divmod(current, width)
            if cx < min_x:
                min_x = cx
            elif cx > max_x:
                max_x = cx
            if cy < min_y:
                min_y = cy
            elif cy > max_y:
                max_y = cy

            # up, down, left, right; never diagonal
            if cy > 0:
                nxt = current - width
                if flat[nxt] and not visited[nxt]:
                    visited[nxt] = 1
                    stack.append(nxt)
            if cy < height - 1:
                nxt = current + width
                if flat[nxt] and not visited[nxt]:
                    visited[nxt] = 1
                    stack.append(nxt)
            if cx > 0:
                nxt = current - 1
                if flat[nxt] and not visited[nxt]:
                    visited[nxt] = 1
                    stack.append(nxt)
            if cx < width - 1:
                nxt = current + 1
                if flat[nxt] and not visited[nxt]:
                    visited[nxt] = 1
                    stack.append(nxt)

        box_w = max_x - min_x + 1
        box_h = max_y - min_y + 1
        if box_w * box_h >= min_area:
            boxes.append(Rect(min_x, min_y, box_w, box_h))

    return boxes
