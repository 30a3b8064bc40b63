"""
Visualization Utilities

Debug overlays for detected document boundaries.
"""

from typing import Tuple

import cv2
import numpy as np

from src.scanner.types import Quadrilateral, RasterImage

CORNER_LABELS = ("TL", "TR", "BR", "BL")


def draw_quadrilateral(
    image: RasterImage,
    quadrilateral: Quadrilateral,
    color: Tuple[int, int, int] = (0, 255, 0),
    thickness: int = 2,
) -> RasterImage:
    """
    Draw a quadrilateral with labelled corners on a copy of the image.

    Args:
        image: Source image (grayscale is converted to BGR for drawing).
        quadrilateral: Corners to draw, TL/TR/BR/BL.
        color: BGR line color.
        thickness: Line thickness in pixels.

    Returns:
        New 3-channel RasterImage with the overlay.
    """
    canvas = image.to_numpy()
    if image.channels == 1:
        canvas = cv2.cvtColor(canvas.reshape(image.height, image.width), cv2.COLOR_GRAY2BGR)
    elif image.channels == 4:
        canvas = cv2.cvtColor(canvas, cv2.COLOR_BGRA2BGR)

    pts = np.round(quadrilateral.points).astype(np.int32)
    cv2.polylines(canvas, [pts.reshape(-1, 1, 2)], True, color, thickness)

    for label, (x, y) in zip(CORNER_LABELS, pts):
        cv2.circle(canvas, (int(x), int(y)), thickness * 3, (0, 0, 255), -1)
        cv2.putText(
            canvas,
            label,
            (int(x) + 5, int(y) + 5),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.6,
            (0, 0, 255),
            2,
        )

    return RasterImage(canvas)
