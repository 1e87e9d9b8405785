import unittest
from unittest import mock

from qrcam.camera.session import CaptureSession, open_input
from qrcam.qr.errors import DeviceBusy
from tests.fakes import BACK, FRONT, EchoReader, FakeOpener


class TestCaptureSession(unittest.TestCase):
    def setUp(self):
        self.opener = FakeOpener(frames={0: [["from-back"]], 1: [["from-front"]]})
        self.session = CaptureSession(EchoReader(), open_input=self.opener)
        self.session.attach(BACK)

    def test_reads_from_active_input(self):
        self.assertEqual(self.session.read_frame(), ["from-back"])
        self.assertIsNone(self.session.read_frame())

    def test_replace_input_releases_old(self):
        old = self.opener.opened[0]
        self.session.replace_input(FRONT)
        self.assertIs(self.session.active_device, FRONT)
        self.assertTrue(old.released)
        self.assertEqual(self.session.read_frame(), ["from-front"])

    def test_failed_replace_keeps_old_input(self):
        self.opener.busy.add(FRONT.index)
        with self.assertRaises(DeviceBusy):
            self.session.replace_input(FRONT)
        self.assertIs(self.session.active_device, BACK)
        self.assertFalse(self.opener.opened[0].released)
        self.assertEqual(self.session.read_frame(), ["from-back"])

    def test_close_is_idempotent(self):
        self.session.close()
        self.session.close()
        self.assertIsNone(self.session.active_device)
        self.assertTrue(self.opener.opened[0].released)
        self.assertIsNone(self.session.read_frame())

    def test_attach_twice_is_refused(self):
        with self.assertRaises(RuntimeError):
            self.session.attach(FRONT)


class TestOpenInput(unittest.TestCase):
    @mock.patch("qrcam.camera.session.cv2.VideoCapture")
    def test_device_that_does_not_open_is_busy(self, video_capture):
        video_capture.return_value.isOpened.return_value = False
        with self.assertRaises(DeviceBusy):
            open_input(BACK)
        video_capture.return_value.release.assert_called_once()

    @mock.patch("qrcam.camera.session.cv2.VideoCapture")
    def test_applies_resolution(self, video_capture):
        cap = video_capture.return_value
        cap.isOpened.return_value = True
        cap.read.return_value = (True, "frame")

        inp = open_input(BACK, width=640, height=480, fps=15)
        self.assertEqual(cap.set.call_count, 3)
        self.assertEqual(inp.read(), "frame")
        inp.release()
        inp.release()
        cap.release.assert_called_once()
        self.assertIsNone(inp.read())


if __name__ == "__main__":
    unittest.main()
