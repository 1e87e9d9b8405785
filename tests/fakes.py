"""Stand-ins for cameras and the decoder so scanner tests need no hardware."""
import threading

from qrcam.camera.devices import CameraDevice, CameraPosition
from qrcam.qr.errors import DeviceBusy

BACK = CameraDevice(index=0, position=CameraPosition.back, name="back-0")
FRONT = CameraDevice(index=1, position=CameraPosition.front, name="front-1")


class FakeInput:
    def __init__(self, device, frames=None):
        self.device = device
        self.frames = list(frames or [])
        self.released = False
        self._lock = threading.Lock()

    def read(self):
        with self._lock:
            if self.released or not self.frames:
                return None
            return self.frames.pop(0)

    def release(self):
        self.released = True


class FakeOpener:
    """open_input() replacement. Indices in `busy` fail with DeviceBusy."""

    def __init__(self, busy=(), frames=None):
        self.busy = set(busy)
        self.frames = frames or {}
        self.opened = []

    def __call__(self, device):
        if device.index in self.busy:
            raise DeviceBusy(f"index {device.index} busy")
        inp = FakeInput(device, self.frames.get(device.index))
        self.opened.append(inp)
        return inp


class EchoReader:
    """Frames are lists of strings already; decoding returns them."""

    def decode_bgr(self, frame):
        return list(frame)


class GatedReader(EchoReader):
    """Blocks every decode until the gate is opened."""

    def __init__(self):
        self.gate = threading.Event()
        self.entered = threading.Event()

    def decode_bgr(self, frame):
        self.entered.set()
        self.gate.wait(5)
        return list(frame)
