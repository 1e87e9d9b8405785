class QRError(Exception):
    """Base class for everything the generator and scanner raise."""


# ---------- generator ----------
class InputError(QRError):
    pass

class EmptyInput(InputError):
    pass


# ---------- codec ----------
class CodecError(QRError):
    pass

class EncodingError(CodecError):
    """Text could not be turned into UTF-8 bytes."""

class GenerationError(CodecError):
    """qrcode refused the payload (too long for version 40, etc)."""


# ---------- camera ----------
class CameraError(QRError):
    pass

class NoCameraAvailable(CameraError):
    pass

class DeviceBusy(CameraError):
    pass

class OutputUnsupported(CameraError):
    pass


class ScannerStateError(QRError):
    """Operation has no transition from the scanner's current state."""
