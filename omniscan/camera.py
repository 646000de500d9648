"""Grab a still from a local camera and hand it over as a data URI."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from .images import to_data_uri


def _cv2():
    try:
        import cv2
    except ImportError:
        raise ImportError(
            "opencv-python is required: pip install 'omniscan[camera]'"
        ) from None
    return cv2


@dataclass
class CameraFrame:
    camera_index: int
    image: str  # JPEG data URI, ready for submit()
    captured_at: str  # ISO8601


class ScanCamera:
    """Stand-in for the upload box: one frame in, one JPEG data URI out.

    Frames never touch the disk. Anything larger than ``max_side`` pixels on
    its longest edge is scaled down before encoding.
    """

    def __init__(self, jpeg_quality: int = 90, max_side: int = 1600) -> None:
        self._jpeg_quality = jpeg_quality
        self._max_side = max_side

    def capture(self, camera_index: int = 0) -> CameraFrame:
        cv2 = _cv2()
        device = cv2.VideoCapture(camera_index)
        try:
            if not device.isOpened():
                raise RuntimeError(f"Não foi possível abrir a câmera {camera_index}.")
            ok, frame = device.read()
        finally:
            device.release()

        if not ok or frame is None:
            raise RuntimeError(f"A câmera {camera_index} não retornou imagem.")

        return CameraFrame(
            camera_index=camera_index,
            image=self.encode(frame),
            captured_at=datetime.now(timezone.utc).isoformat(),
        )

    def encode(self, frame) -> str:
        """Downscale if needed and JPEG-encode *frame* in memory."""
        cv2 = _cv2()
        height, width = frame.shape[:2]
        longest = max(height, width)
        if longest > self._max_side:
            scale = self._max_side / longest
            frame = cv2.resize(
                frame,
                (int(width * scale), int(height * scale)),
                interpolation=cv2.INTER_AREA,
            )

        ok, buffer = cv2.imencode(
            ".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, self._jpeg_quality]
        )
        if not ok:
            raise RuntimeError("Falha ao codificar o quadro em JPEG.")
        return to_data_uri(buffer.tobytes(), "image/jpeg")

    @staticmethod
    def list_cameras(limit: int = 10) -> list[int]:
        """Indices below *limit* that open as a camera."""
        cv2 = _cv2()
        found: list[int] = []
        for index in range(limit):
            device = cv2.VideoCapture(index)
            if device.isOpened():
                found.append(index)
            device.release()
        return found
