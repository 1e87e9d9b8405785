import unittest

import numpy as np

from qrcam.qr.errors import CodecError
from qrcam.qr.qr_generator import generate, to_png_bytes
from qrcam.qr.qr_reader import QRReader


class TestQRReader(unittest.TestCase):
    def setUp(self):
        self.reader = QRReader()

    def test_blank_frame_is_empty_not_error(self):
        frame = np.full((480, 640, 3), 255, dtype=np.uint8)
        self.assertEqual(self.reader.decode_bgr(frame), [])

    def test_noise_frame_is_empty(self):
        rng = np.random.default_rng(7)
        frame = rng.integers(0, 256, size=(240, 320, 3), dtype=np.uint8)
        self.assertEqual(self.reader.decode_bgr(frame), [])

    def test_missing_frame(self):
        self.assertEqual(self.reader.decode_bgr(None), [])
        self.assertEqual(self.reader.decode_bgr(np.zeros((0, 0, 3), dtype=np.uint8)), [])

    def test_decode_png_bytes(self):
        data = to_png_bytes(generate("still image", scale=6))
        self.assertEqual(self.reader.decode_image(data), ["still image"])

    def test_surrounding_whitespace_is_kept(self):
        data = to_png_bytes(generate("  keep me \n", scale=6))
        self.assertEqual(self.reader.decode_image(data), ["  keep me \n"])

    def test_decode_garbage_bytes(self):
        with self.assertRaises(CodecError):
            self.reader.decode_image(b"definitely not an image")
        with self.assertRaises(CodecError):
            self.reader.decode_image(b"")


if __name__ == "__main__":
    unittest.main()
