from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import cv2

from qrcam.camera.devices import CameraDevice
from qrcam.qr.errors import DeviceBusy

logger = logging.getLogger(__name__)


class CaptureInput:
    """One opened camera. read() gives a BGR frame or None."""

    def __init__(self, device: CameraDevice, cap):
        self.device = device
        self.cap = cap
        self._released = False

    def read(self):
        if self._released:
            return None
        ok, frame = self.cap.read()
        return frame if ok else None

    def release(self):
        if self._released:
            return
        self._released = True
        self.cap.release()


def open_input(device: CameraDevice, width=None, height=None, fps=None, api_preference=cv2.CAP_ANY) -> CaptureInput:
    cap = cv2.VideoCapture(device.index, api_preference)
    if not cap.isOpened():
        cap.release()
        raise DeviceBusy(f"Cannot open {device.label()} (index {device.index}).")

    if width:
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, int(width))
    if height:
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, int(height))
    if fps:
        cap.set(cv2.CAP_PROP_FPS, int(fps))
    return CaptureInput(device, cap)


class CaptureSession:
    """
    Exactly one input and one QR output at a time.

    replace_input() opens the new device before touching the old one, so a
    device that fails to open leaves the session as it was. Frame reads and
    the swap share one lock: no frame comes from a half-swapped session.
    """
    def __init__(self, output, open_input: Callable[[CameraDevice], CaptureInput] = open_input):
        self.output = output
        self._open_input = open_input
        self._input: Optional[CaptureInput] = None
        self._lock = threading.Lock()
        self._closed = False

    @property
    def active_device(self) -> Optional[CameraDevice]:
        inp = self._input
        return inp.device if inp is not None else None

    def attach(self, device: CameraDevice) -> None:
        if self._input is not None:
            raise RuntimeError("Session already has an input, use replace_input().")
        new_input = self._open_input(device)
        with self._lock:
            self._input = new_input
            self._closed = False
        logger.info("Capture input attached: %s", device.label())

    def replace_input(self, device: CameraDevice) -> None:
        new_input = self._open_input(device)  # raises DeviceBusy, old input untouched

        with self._lock:
            old = self._input
            self._input = new_input

        if old is not None:
            old.release()
        logger.info("Capture input switched: %s -> %s",
                    old.device.label() if old else None, device.label())

    def read_frame(self):
        with self._lock:
            if self._input is None:
                return None
            return self._input.read()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            inp, self._input = self._input, None
            if inp is not None:
                inp.release()
        logger.info("Capture session closed.")
