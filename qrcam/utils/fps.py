import time

class FPS:
    """Smoothed frames-per-second for the preview overlay."""

    def __init__(self, smoothing: float = 0.9):
        self.smoothing = smoothing
        self.last = time.monotonic()
        self.value = 0.0

    def tick(self):
        now = time.monotonic()
        dt = now - self.last
        self.last = now
        if dt > 0:
            inst = 1.0 / dt
            self.value = inst if self.value == 0.0 else self.smoothing * self.value + (1 - self.smoothing) * inst
        return self.value
