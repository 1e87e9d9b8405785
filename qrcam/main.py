import functools
import logging
import time
from collections import deque

import cv2
import yaml

from backend.core.logging import setup_logging
from qrcam.camera.devices import OpenCVCameraEnumerator
from qrcam.camera.session import open_input
from qrcam.events.decoded_publisher import BackgroundPublisher, DecodedPublisher
from qrcam.qr.errors import CameraError
from qrcam.scanner import QRScanner
from qrcam.utils.draw import draw_lines
from qrcam.utils.fps import FPS

logger = logging.getLogger("qrcam")


def load_yaml(path):
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def build_scanner(cfg, on_decoded):
    cam_cfg = cfg.get("camera", {}) or {}
    scan_cfg = cfg.get("scanner", {}) or {}

    enumerator = OpenCVCameraEnumerator(cfg.get("cameras") or [])
    opener = functools.partial(
        open_input,
        width=cam_cfg.get("width"),
        height=cam_cfg.get("height"),
        fps=cam_cfg.get("fps"),
    )
    return QRScanner(
        on_decoded,
        enumerator,
        open_input=opener,
        decode_every_n=int(scan_cfg.get("decode_every_n_frames", 1)),
    )


def main(config_path="config/scanner.yaml"):
    cfg = load_yaml(config_path)
    setup_logging((cfg.get("logging") or {}).get("level"))

    pub_cfg = cfg.get("publish", {}) or {}
    publisher = None
    if pub_cfg.get("enabled"):
        publisher = BackgroundPublisher(DecodedPublisher(
            base_url=pub_cfg["base_url"],
            path=pub_cfg.get("scans_path", "/api/scans"),
            timeout_seconds=int(pub_cfg.get("timeout_seconds", 2)),
        ))

    recent = deque(maxlen=5)
    scanner = None

    def on_decoded(strings):
        for s in strings:
            logger.info("QR: %s", s)
            recent.append(s)
        if publisher is None:
            return
        device = scanner.active_device
        publisher.submit(strings, camera_position=device.position.value if device else None)

    scanner = build_scanner(cfg, on_decoded)
    preferred = (cfg.get("camera") or {}).get("preferred_position", "back")
    try:
        scanner.start(preferred)
    except CameraError as ex:
        raise SystemExit(f"Cannot start scanner: {ex}")

    scan_cfg = cfg.get("scanner", {}) or {}
    try:
        with scanner:
            if scan_cfg.get("show_preview", True):
                _preview_loop(scanner, recent, scan_cfg.get("window_title", "QR Scanner"))
            else:
                _headless_loop(scanner)
    finally:
        if publisher is not None:
            publisher.close()


def _preview_loop(scanner, recent, title):
    fps = FPS()
    print("QR scanner running. Press 'c' to switch camera, 'q' to quit.")
    try:
        while True:
            frame = scanner.last_frame
            if frame is not None:
                annotated = frame.copy()
                device = scanner.active_device
                lines = [f"FPS: {fps.tick():.1f}", f"Camera: {device.label() if device else '-'}"]
                lines += [f"QR: {s[:60]}" for s in recent]
                draw_lines(annotated, lines)
                cv2.imshow(title, annotated)

            key = cv2.waitKey(15) & 0xFF
            if key == ord("q"):
                break
            if key == ord("c"):
                try:
                    device = scanner.switch_camera()
                    if device is not None:
                        print("Camera:", device.label())
                except CameraError as ex:
                    logger.warning("Switch failed, staying on current camera: %s", ex)
    finally:
        cv2.destroyAllWindows()


def _headless_loop(scanner):
    print("QR scanner running headless. Ctrl+C to quit.")
    try:
        while True:
            time.sleep(5)
            logger.info("Stats: %s", scanner.stats)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
