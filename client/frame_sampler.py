# client/frame_sampler.py
import base64
import logging
import os
import re
from dataclasses import dataclass
from typing import Callable, List, Tuple, Union
import cv2
from util.constants import THUMBNAIL_COUNT, THUMBNAIL_JPEG_QUALITY
from util.timing import timed

logger = logging.getLogger(__name__)

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(;[^,]*)?;base64,(?P<data>.*)$", re.S)


class FrameDecodeError(Exception):
    """The media could not be decoded; no frames are returned."""


@dataclass(frozen=True)
class PreviewFrame:
    data_url: str  # data:image/jpeg;base64,...
    source_offset_seconds: float


def sample_offsets(duration: float, count: int) -> List[float]:
    """
    `count` evenly spaced offsets that skip the first and last instants
    (near-black openings, credits): interval = duration / (count + 1).
    """
    if count <= 0 or duration <= 0:
        return []
    interval = duration / (count + 1)
    return [i * interval for i in range(1, count + 1)]


def data_url_to_bytes(data_url: str) -> Tuple[bytes, str]:
    """
    Decode a base64 data URL into (payload, mime type) so a chosen frame can be
    uploaded like any other file.
    """
    m = _DATA_URL.match(data_url or "")
    if not m:
        raise ValueError("not a base64 data URL")
    return base64.b64decode(m.group("data")), m.group("mime") or "image/jpeg"


class FrameSampler:
    """
    Samples preview frames from a local media file with OpenCV.

    Strictly sequential per file: seek -> confirm -> read -> encode -> next, since
    a single capture cannot serve concurrent seeks.
    """

    def __init__(
        self,
        quality: int = THUMBNAIL_JPEG_QUALITY,
        capture_factory: Callable[[str], "cv2.VideoCapture"] = cv2.VideoCapture,
    ) -> None:
        self._quality = int(quality)
        self._open = capture_factory

    def sample(
        self, path: Union[str, os.PathLike], count: int = THUMBNAIL_COUNT
    ) -> List[PreviewFrame]:
        src = os.fspath(path)
        cap = self._open(src)
        try:
            if not cap.isOpened():
                raise FrameDecodeError(f"cannot open media: {os.path.basename(src)}")

            duration = self._duration(cap)
            frames: List[PreviewFrame] = []
            with timed(logger, "frames.sample", count=count, duration=round(duration, 2)):
                for offset in sample_offsets(duration, count):
                    frames.append(self._capture(cap, offset))
            return frames
        finally:
            cap.release()

    @staticmethod
    def _duration(cap) -> float:
        fps = cap.get(cv2.CAP_PROP_FPS) or 0.0
        total = cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0.0
        if fps <= 0 or total <= 0:
            raise FrameDecodeError("media duration unavailable")
        return total / fps

    def _capture(self, cap, offset: float) -> PreviewFrame:
        if not cap.set(cv2.CAP_PROP_POS_MSEC, offset * 1000.0):
            raise FrameDecodeError(f"seek failed at {offset:.2f}s")
        ok, frame = cap.read()
        if not ok or frame is None:
            raise FrameDecodeError(f"no frame at {offset:.2f}s")
        ok, buf = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), self._quality])
        if not ok:
            raise FrameDecodeError(f"jpeg encode failed at {offset:.2f}s")
        encoded = base64.b64encode(buf.tobytes()).decode("ascii")
        return PreviewFrame(
            data_url=f"data:image/jpeg;base64,{encoded}", source_offset_seconds=offset
        )
