from __future__ import annotations

import dataclasses
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from qrcam.camera.devices import CameraDevice, CameraPosition, CameraSlots, select_initial
from qrcam.camera.session import CaptureSession, open_input
from qrcam.qr.errors import ScannerStateError
from qrcam.qr.qr_reader import QRReader

logger = logging.getLogger(__name__)

Listener = Callable[[List[str]], None]


class ScannerState(str, Enum):
    idle = "idle"
    starting = "starting"
    running = "running"
    stopped = "stopped"


@dataclass
class ScannerStats:
    frames_delivered: int = 0
    frames_decoded: int = 0
    frames_dropped: int = 0
    results_reported: int = 0
    last_frame_at: Optional[float] = None


class QRScanner:
    """
    Live QR scanner over one camera at a time.

      Idle -> Starting -> Running -> Stopped
      (Starting falls back to Idle on any setup error, Stopped is final)

    A delivery thread pulls frames from the capture session and hands them to
    a single decode worker. While a decode is in flight new frames are
    dropped, never queued. The listener only hears about frames that held at
    least one code; poll `stats` to see that the session is still alive.
    """

    def __init__(
        self,
        listener: Listener,
        list_cameras: Callable[[], List[CameraDevice]],
        open_input=open_input,
        reader_factory=QRReader,
        dispatch: Optional[Callable] = None,
        decode_every_n: int = 1,
        idle_wait_seconds: float = 0.01,
    ):
        self._listener = listener
        self._list_cameras = list_cameras
        self._open_input = open_input
        self._reader_factory = reader_factory
        self._dispatch = dispatch  # e.g. GUI "call on main thread"; called as dispatch(listener, strings)
        self.decode_every_n = max(1, int(decode_every_n))
        self.idle_wait_seconds = float(idle_wait_seconds)

        self._state = ScannerState.idle
        self._control_lock = threading.Lock()
        self._frame_lock = threading.Lock()
        self._busy = False
        self._stats = ScannerStats()

        self._slots: Optional[CameraSlots] = None
        self._reader = None
        self._session: Optional[CaptureSession] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._delivery: Optional[threading.Thread] = None
        self._decode_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._frame_i = 0
        self.last_frame = None

    # ---------- properties ----------
    @property
    def state(self) -> ScannerState:
        return self._state

    @property
    def active_device(self) -> Optional[CameraDevice]:
        return self._session.active_device if self._session is not None else None

    @property
    def cameras(self) -> List[CameraDevice]:
        return self._slots.devices() if self._slots is not None else []

    @property
    def stats(self) -> ScannerStats:
        with self._frame_lock:
            return dataclasses.replace(self._stats)

    # ---------- lifecycle ----------
    def start(self, preferred_position=CameraPosition.back) -> CameraDevice:
        with self._control_lock:
            if self._state is not ScannerState.idle:
                raise ScannerStateError(f"Cannot start from state {self._state.value}.")
            self._state = ScannerState.starting

            try:
                slots = CameraSlots.from_devices(self._list_cameras())
                device = select_initial(slots, preferred_position)
                reader = self._reader_factory()
                session = CaptureSession(reader, open_input=self._open_input)
                session.attach(device)
            except Exception:
                self._state = ScannerState.idle
                raise

            self._slots = slots
            self._reader = reader
            self._session = session
            self._stop_event.clear()
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="qr-decode")
            self._delivery = threading.Thread(target=self._delivery_loop, name="qr-delivery", daemon=True)
            self._state = ScannerState.running
            self._delivery.start()

        logger.info("Scanner running on %s (%d camera(s) tracked)", device.label(), len(slots))
        return device

    def switch_camera(self) -> Optional[CameraDevice]:
        """
        Swap to the other tracked camera. With fewer than two cameras this is
        a no-op. If the other camera can't be opened, DeviceBusy is raised and
        the current one stays active. Once stopped it does nothing and
        returns None.
        """
        with self._control_lock:
            if self._state is ScannerState.stopped:
                return None
            if self._state is not ScannerState.running:
                raise ScannerStateError(f"Cannot switch camera in state {self._state.value}.")

            current = self._session.active_device
            if not self._slots.has_both():
                logger.debug("Only one camera tracked, switch ignored.")
                return current

            target = self._slots.get(current.position.other())
            self._session.replace_input(target)
            return target

    def stop(self) -> None:
        # lock only covers the state flip; joins happen outside it so a
        # listener calling back into the scanner can't block the worker
        with self._control_lock:
            if self._state is ScannerState.stopped:
                return
            self._state = ScannerState.stopped
            self._stop_event.set()
            delivery, self._delivery = self._delivery, None
            executor, self._executor = self._executor, None
            session = self._session

        if delivery is not None and delivery is not threading.current_thread():
            delivery.join()

        if executor is not None:
            # a listener may call stop() from the decode worker itself
            in_worker = threading.current_thread() is self._decode_thread
            executor.shutdown(wait=not in_worker)

        if session is not None:
            session.close()

        logger.info("Scanner stopped. %s", self.stats)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    # ---------- frames ----------
    def submit_frame(self, frame) -> bool:
        """
        Hand one frame to the decoder. Returns False if it was dropped
        (decode already in flight, or scanner not running).
        """
        with self._frame_lock:
            if self._state is not ScannerState.running or self._executor is None:
                return False
            self._stats.frames_delivered += 1
            self._stats.last_frame_at = time.time()
            if self._busy:
                self._stats.frames_dropped += 1
                return False
            self._busy = True
            executor = self._executor

        try:
            executor.submit(self._decode, frame)
        except RuntimeError:
            # executor shut down between the check and the submit
            with self._frame_lock:
                self._busy = False
                self._stats.frames_dropped += 1
            return False
        return True

    def _delivery_loop(self):
        while not self._stop_event.is_set():
            frame = self._session.read_frame()
            if frame is None:
                self._stop_event.wait(self.idle_wait_seconds)
                continue

            self.last_frame = frame  # preview only
            self._frame_i += 1
            if self._frame_i % self.decode_every_n != 0:
                continue
            self.submit_frame(frame)

    def _decode(self, frame):
        self._decode_thread = threading.current_thread()
        try:
            strings = self._reader.decode_bgr(frame)
            with self._frame_lock:
                self._stats.frames_decoded += 1
            if strings:
                with self._frame_lock:
                    self._stats.results_reported += 1
                self._report(list(strings))
        except Exception:
            logger.exception("QR decode pass failed")
        finally:
            with self._frame_lock:
                self._busy = False

    def _report(self, strings: List[str]):
        if self._dispatch is not None:
            self._dispatch(self._listener, strings)
        else:
            self._listener(strings)
