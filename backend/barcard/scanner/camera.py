"""
OpenCV camera capture and barcode decoding.
"""
import logging
from typing import List

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def open_camera(index: int = 0) -> cv2.VideoCapture:
    """
    Open a video capture device.

    Args:
        index: Device index (0 is usually the default / rear camera on phones)

    Returns:
        VideoCapture (check isOpened() before reading)
    """
    capture = cv2.VideoCapture(index)
    logger.info(f"[SCANNER] Opened camera {index}: {capture.isOpened()}")
    return capture


class OpenCVBarcodeDecoder:
    """Decodes 1D barcodes (EAN/UPC/Code128...) with OpenCV's barcode detector."""

    def __init__(self):
        self._detector = cv2.barcode.BarcodeDetector()

    def __call__(self, frame: np.ndarray) -> List[str]:
        """
        Decode every barcode visible in a frame.

        Args:
            frame: BGR image

        Returns:
            Decoded texts, empty when nothing was found
        """
        ok, decoded_info, _, _ = self._detector.detectAndDecodeMulti(frame)
        if not ok:
            return []
        return [text for text in decoded_info if text]
