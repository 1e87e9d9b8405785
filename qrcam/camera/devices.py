from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

import cv2

from qrcam.qr.errors import NoCameraAvailable

logger = logging.getLogger(__name__)


class CameraPosition(str, Enum):
    back = "back"
    front = "front"

    def other(self) -> "CameraPosition":
        return CameraPosition.front if self is CameraPosition.back else CameraPosition.back

    @classmethod
    def parse(cls, value: Union["CameraPosition", str]) -> "CameraPosition":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class CameraDevice:
    index: int
    position: CameraPosition
    name: str = ""

    def label(self) -> str:
        return self.name or f"{self.position.value} camera #{self.index}"


class CameraSlots:
    """
    At most one device per position.
    The first device seen for a position wins; devices() always lists back first.
    """
    def __init__(self, back: Optional[CameraDevice] = None, front: Optional[CameraDevice] = None):
        self.back = back
        self.front = front

    @classmethod
    def from_devices(cls, devices: Iterable[CameraDevice]) -> "CameraSlots":
        slots = cls()
        for d in devices:
            if slots.get(d.position) is None:
                slots._set(d.position, d)
            else:
                logger.debug("Ignoring extra %s camera: %s", d.position.value, d.label())
        return slots

    def _set(self, position: CameraPosition, device: CameraDevice) -> None:
        if position is CameraPosition.back:
            self.back = device
        else:
            self.front = device

    def get(self, position: CameraPosition) -> Optional[CameraDevice]:
        return self.back if position is CameraPosition.back else self.front

    def devices(self) -> List[CameraDevice]:
        return [d for d in (self.back, self.front) if d is not None]

    def has_both(self) -> bool:
        return self.back is not None and self.front is not None

    def __len__(self):
        return len(self.devices())

    def __repr__(self):
        return f"CameraSlots(back={self.back!r}, front={self.front!r})"


def select_initial(slots: CameraSlots, preferred=CameraPosition.back) -> CameraDevice:
    preferred = CameraPosition.parse(preferred)
    device = slots.get(preferred) or slots.get(preferred.other())
    if device is None:
        raise NoCameraAvailable("No camera available.")
    return device


class OpenCVCameraEnumerator:
    """
    Default list_cameras() collaborator.

    OpenCV can't tell which way a webcam faces, so positions come from config:
      cameras:
        - {index: 0, position: back, name: "USB cam"}
        - {index: 1, position: front}
    Each index is probed once and released; indices that don't open are skipped.
    """
    def __init__(self, candidates: List[Dict], api_preference: int = cv2.CAP_ANY):
        self.candidates = list(candidates or [])
        self.api_preference = api_preference

    def __call__(self) -> List[CameraDevice]:
        return self.list_cameras()

    def list_cameras(self) -> List[CameraDevice]:
        found = []
        for c in self.candidates:
            index = int(c["index"])
            position = CameraPosition.parse(c.get("position", "back"))
            cap = cv2.VideoCapture(index, self.api_preference)
            try:
                ok = cap.isOpened()
            finally:
                cap.release()
            if not ok:
                logger.info("Camera index %d (%s) not available", index, position.value)
                continue
            found.append(CameraDevice(index=index, position=position, name=str(c.get("name") or "")))
        logger.info("Found cameras: %s", [d.label() for d in found])
        return found
