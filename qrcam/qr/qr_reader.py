import logging
from typing import List

import cv2
import numpy as np

from qrcam.qr.errors import CodecError, OutputUnsupported

logger = logging.getLogger(__name__)


class QRReader:
    """
    Uses OpenCV QRCodeDetector to decode QR codes from a BGR frame.
    Returns:
      ordered list of decoded strings ([] when nothing is found)

    A frame with no readable code is "nothing found", not an error.
    """
    def __init__(self):
        if not hasattr(cv2, "QRCodeDetector"):
            raise OutputUnsupported("This OpenCV build has no QRCodeDetector.")
        self.detector = cv2.QRCodeDetector()

    def decode_bgr(self, frame_bgr) -> List[str]:
        if frame_bgr is None or getattr(frame_bgr, "size", 0) == 0:
            return []

        # Try multi first, a frame may hold several codes
        try:
            ok, data, points, _ = self.detector.detectAndDecodeMulti(frame_bgr)
        except cv2.error as ex:
            logger.debug("detectAndDecodeMulti failed: %s", ex)
            ok, data = False, None

        if ok and data:
            found = [s for s in data if s]
            if found:
                return found

        # Single fallback
        try:
            txt, _, _ = self.detector.detectAndDecode(frame_bgr)
        except cv2.error as ex:
            logger.debug("detectAndDecode failed: %s", ex)
            return []
        if txt:
            return [txt]
        return []

    def decode_image(self, image_bytes: bytes) -> List[str]:
        """
        Decode an encoded still image (PNG, JPEG, ...).
        """
        buf = np.frombuffer(image_bytes or b"", dtype=np.uint8)
        frame = None
        if buf.size:
            try:
                frame = cv2.imdecode(buf, cv2.IMREAD_COLOR)
            except cv2.error as ex:
                raise CodecError(f"Could not read image: {ex}") from ex
        if frame is None:
            raise CodecError("Could not read image: unsupported or empty data.")
        return self.decode_bgr(frame)
