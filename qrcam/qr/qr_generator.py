import argparse
import io
import logging
import os
from enum import Enum
from typing import Union

import cv2
import numpy as np
import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError

from qrcam.qr.errors import EmptyInput, EncodingError, GenerationError, InputError

logger = logging.getLogger(__name__)


class CorrectionLevel(str, Enum):
    L = "L"  # ~7% recovery
    M = "M"  # ~15%
    Q = "Q"  # ~25%
    H = "H"  # ~30%

    @property
    def qrcode_constant(self) -> int:
        return _QRCODE_LEVELS[self]

    @classmethod
    def parse(cls, level: Union["CorrectionLevel", str]) -> "CorrectionLevel":
        if isinstance(level, cls):
            return level
        try:
            return cls(str(level).strip().upper())
        except ValueError:
            raise InputError(f"Unknown correction level: {level!r} (expected L, M, Q or H)")


_QRCODE_LEVELS = {
    CorrectionLevel.L: ERROR_CORRECT_L,
    CorrectionLevel.M: ERROR_CORRECT_M,
    CorrectionLevel.Q: ERROR_CORRECT_Q,
    CorrectionLevel.H: ERROR_CORRECT_H,
}


def encode_matrix(text: str, level="L", border: int = 4) -> np.ndarray:
    """
    Build the QR symbol for `text`.
    Returns a 2D bool array (True = dark module), quiet zone included.
    """
    if not text:
        raise EmptyInput("Text is empty, nothing to encode.")
    if border < 0:
        raise InputError("border must be >= 0")
    lvl = CorrectionLevel.parse(level)

    try:
        data = text.encode("utf-8")
    except UnicodeEncodeError as ex:
        raise EncodingError(f"Text is not valid UTF-8: {ex}") from ex

    qr = qrcode.QRCode(
        version=None,
        error_correction=lvl.qrcode_constant,
        box_size=1,
        border=border,
    )
    try:
        qr.add_data(data)
        qr.make(fit=True)
        matrix = qr.get_matrix()
    except (DataOverflowError, ValueError) as ex:
        raise GenerationError(f"Could not build QR symbol ({len(data)} bytes, level {lvl.value}): {ex}") from ex

    logger.debug("encoded %d bytes as version %s level %s", len(data), qr.version, lvl.value)
    return np.array(matrix, dtype=bool)


def render(matrix: np.ndarray, scale: int = 10) -> Image.Image:
    """
    Rasterize a module matrix. Nearest-neighbour only: each module becomes an
    exact scale x scale block, no blurred edges.
    """
    if scale < 1:
        raise InputError("scale must be >= 1")
    pixels = np.where(matrix, 0, 255).astype(np.uint8)
    img = Image.fromarray(pixels)
    h, w = pixels.shape
    return img.resize((w * scale, h * scale), resample=Image.Resampling.NEAREST)


def generate(text: str, level="L", scale: int = 10, border: int = 4) -> Image.Image:
    return render(encode_matrix(text, level=level, border=border), scale=scale)


def to_png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_bgr(img: Image.Image) -> np.ndarray:
    # OpenCV wants BGR uint8, PIL gives us grayscale
    gray = np.array(img.convert("L"))
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate a QR code PNG from text")
    parser.add_argument("text", help="Text to encode (UTF-8)")
    parser.add_argument("output", help="Output PNG path")
    parser.add_argument("--level", choices=["L", "M", "Q", "H"], default="L",
                        help="Error correction level (default: L)")
    parser.add_argument("--scale", type=int, default=10, help="Pixels per module (default: 10)")
    parser.add_argument("--border", type=int, default=4, help="Quiet zone in modules (default: 4)")
    args = parser.parse_args(argv)

    try:
        img = generate(args.text, level=args.level, scale=args.scale, border=args.border)
    except (InputError, EncodingError, GenerationError) as ex:
        raise SystemExit(f"Error generating QR code: {ex}")

    out_dir = os.path.dirname(args.output)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    img.save(args.output)

    print("\n QR created:")
    print("File:", args.output)
    print("Size:", f"{img.width}x{img.height}")


if __name__ == "__main__":
    main()
