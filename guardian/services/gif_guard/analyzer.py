"""
GIF Hazard Analyzer
===================

Decodes animated GIFs and classifies them as photosensitivity or
client-crash hazards.

DESIGN:
    Everything here is synchronous and CPU bound; the service runs it in
    a thread executor. Analysis fails closed: any failure to read, parse
    or decode the bytes produces a dangerous verdict with a reason that
    says which stage failed.

    Cheap structural checks (signature, header dimensions, frame count,
    bytes per frame) run before any frame is decoded.
"""

import colorsys
import io
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from PIL import Image, ImageSequence, ImageStat

from guardian.core import constants as C


# =============================================================================
# Reasons
# =============================================================================

REASON_SAFE = "safe"
REASON_OVERSIZED = "oversized"
REASON_BAD_SIGNATURE = "invalid_signature"
REASON_DIMENSIONS = "oversized_dimensions"
REASON_TOO_MANY_FRAMES = "too_many_frames"
REASON_DECODE_ABORTED = "decode_aborted"
REASON_ABNORMAL = "abnormal_structure"
REASON_FLASHING = "flashing"
REASON_DECODE_ERROR = "decode_error"
REASON_FETCH_ERROR = "fetch_error"

REASON_LABELS = {
    REASON_OVERSIZED: "File is too large to be checked safely",
    REASON_BAD_SIGNATURE: "File claims to be a GIF but is not one",
    REASON_DIMENSIONS: "Image dimensions are large enough to crash clients",
    REASON_TOO_MANY_FRAMES: "Too many frames to be checked safely",
    REASON_DECODE_ABORTED: "Frame count exceeds the decode limit",
    REASON_ABNORMAL: "Abnormal frame structure (possible crash GIF)",
    REASON_FLASHING: "Rapid flashing that may trigger seizures",
    REASON_DECODE_ERROR: "The image could not be decoded",
    REASON_FETCH_ERROR: "The image could not be downloaded for checking",
}

GIF_SIGNATURES = (b"GIF87a", b"GIF89a")


class GifDecodeError(Exception):
    """Raised when bytes cannot be read as a GIF."""

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason


# =============================================================================
# Models
# =============================================================================

@dataclass
class HazardVerdict:
    """Result of analyzing one image."""
    dangerous: bool
    reason: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return REASON_LABELS.get(self.reason, self.reason)


@dataclass(frozen=True)
class FrameSample:
    """Coarse colour summary of one frame."""
    luminance: float
    hue: float  # degrees, 0-360
    duration_ms: int


def safe_verdict(**details: Any) -> HazardVerdict:
    return HazardVerdict(False, REASON_SAFE, dict(details))


def oversized_verdict(size_bytes: int) -> HazardVerdict:
    return HazardVerdict(True, REASON_OVERSIZED, {"size_bytes": size_bytes})


# =============================================================================
# Colour Helpers
# =============================================================================

def luminance(r: float, g: float, b: float) -> float:
    """Perceptual luminance on a 0-255 scale."""
    return 0.299 * r + 0.587 * g + 0.114 * b


def hue_degrees(r: float, g: float, b: float) -> float:
    h, _, _ = colorsys.rgb_to_hsv(r / 255, g / 255, b / 255)
    return h * 360


# =============================================================================
# Flashing Classifier
# =============================================================================

def classify_flashing(samples: Sequence[FrameSample]) -> HazardVerdict:
    """
    Classify a frame sequence as flashing or not.

    A pair of adjacent frames is a rapid change when both the luminance
    delta and the hue delta exceed their limits. Hue deltas are the plain
    absolute difference of the hue angles (0-360), so a swing from red to
    magenta counts as a large change.
    """
    frames = len(samples)
    details: Dict[str, Any] = {"frames": frames}
    if frames < 2:
        details.update(rapid_ratio=0.0, fast_ratio=0.0, longest_run=0)
        return safe_verdict(**details)

    pairs = frames - 1
    rapid = 0
    run = longest_run = 0
    max_lum = max_hue = 0.0

    for prev, cur in zip(samples, samples[1:]):
        lum_delta = abs(cur.luminance - prev.luminance)
        hue_delta = abs(cur.hue - prev.hue)
        max_lum = max(max_lum, lum_delta)
        max_hue = max(max_hue, hue_delta)

        if lum_delta > C.FLASH_LUMINANCE_DELTA and hue_delta > C.FLASH_HUE_DELTA:
            rapid += 1
            run += 1
            longest_run = max(longest_run, run)
        else:
            run = 0

    fast = sum(1 for s in samples if s.duration_ms <= C.FAST_FRAME_MS)
    rapid_ratio = rapid / pairs
    fast_ratio = fast / frames

    details.update(
        rapid_ratio=round(rapid_ratio, 3),
        fast_ratio=round(fast_ratio, 3),
        max_luminance_delta=round(max_lum, 1),
        max_hue_delta=round(max_hue, 1),
        longest_run=longest_run,
    )

    if rapid_ratio > C.RAPID_RATIO_STRONG:
        details["rule"] = "rapid_ratio"
    elif rapid_ratio > C.RAPID_RATIO_WEAK and fast_ratio > C.FAST_RATIO_WITH_WEAK:
        details["rule"] = "rapid_and_fast"
    elif (
        max_lum > C.EXTREME_LUMINANCE_DELTA
        and max_hue > C.EXTREME_HUE_DELTA
        and fast_ratio > C.FAST_RATIO_WITH_EXTREME
    ):
        details["rule"] = "extreme_and_fast"
    elif longest_run >= C.RAPID_RUN_LIMIT:
        details["rule"] = "rapid_run"
    else:
        return safe_verdict(**details)

    return HazardVerdict(True, REASON_FLASHING, details)


# =============================================================================
# Structural Checks
# =============================================================================

def read_header(data: bytes) -> Dict[str, int]:
    """
    Validate the GIF signature and read the logical screen size.

    Raises:
        GifDecodeError: If the signature is missing.
    """
    if len(data) < 10 or data[:6] not in GIF_SIGNATURES:
        raise GifDecodeError(REASON_BAD_SIGNATURE, "missing GIF87a/GIF89a signature")
    width = int.from_bytes(data[6:8], "little")
    height = int.from_bytes(data[8:10], "little")
    return {"width": width, "height": height}


def _sample_frame(frame: Image.Image, duration_ms: int) -> FrameSample:
    """Average the colour of every Nth pixel, ignoring transparent ones."""
    rgba = frame.convert("RGBA")
    step = C.GIF_SAMPLE_STEP
    width, height = rgba.size
    sampled = rgba.resize(
        (max(1, (width + step - 1) // step), max(1, (height + step - 1) // step)),
        Image.Resampling.NEAREST,
    )

    mask = sampled.getchannel("A").point(lambda a: 255 if a else 0)
    if mask.getbbox() is None:
        return FrameSample(0.0, 0.0, duration_ms)

    r, g, b = ImageStat.Stat(sampled.convert("RGB"), mask).mean
    return FrameSample(luminance(r, g, b), hue_degrees(r, g, b), duration_ms)


def sample_frames(img: Image.Image) -> List[FrameSample]:
    samples = []
    for frame in ImageSequence.Iterator(img):
        duration = int(frame.info.get("duration", 0) or 0)
        samples.append(_sample_frame(frame, duration))
        if len(samples) > C.GIF_ABORT_FRAMES:
            raise GifDecodeError(REASON_DECODE_ABORTED, "decoded frame count exceeds limit")
    return samples


# =============================================================================
# Entry Point
# =============================================================================

def _analyze(data: bytes) -> HazardVerdict:
    size = len(data)
    if size > C.GIF_MAX_BYTES:
        return oversized_verdict(size)

    header = read_header(data)
    details: Dict[str, Any] = {"size_bytes": size, **header}
    if header["width"] > C.GIF_MAX_DIMENSION or header["height"] > C.GIF_MAX_DIMENSION:
        return HazardVerdict(True, REASON_DIMENSIONS, details)

    with Image.open(io.BytesIO(data)) as img:
        if img.width > C.GIF_MAX_DIMENSION or img.height > C.GIF_MAX_DIMENSION:
            details.update(width=img.width, height=img.height)
            return HazardVerdict(True, REASON_DIMENSIONS, details)

        frame_count = getattr(img, "n_frames", 1)
        details["frames"] = frame_count
        if frame_count > C.GIF_MAX_FRAMES:
            return HazardVerdict(True, REASON_TOO_MANY_FRAMES, details)
        if frame_count > C.GIF_ABORT_FRAMES:
            return HazardVerdict(True, REASON_DECODE_ABORTED, details)
        if frame_count > C.GIF_ABNORMAL_MIN_FRAMES and size / frame_count < C.GIF_ABNORMAL_BYTES_PER_FRAME:
            details["bytes_per_frame"] = round(size / frame_count, 1)
            return HazardVerdict(True, REASON_ABNORMAL, details)

        samples = sample_frames(img)

    verdict = classify_flashing(samples)
    verdict.details.update(size_bytes=size, width=details["width"], height=details["height"])
    return verdict


def analyze_gif(data: bytes) -> HazardVerdict:
    """
    Analyze GIF bytes. Never raises; failures are dangerous verdicts.
    """
    try:
        return _analyze(data)
    except GifDecodeError as e:
        return HazardVerdict(True, e.reason, {"error": str(e), "size_bytes": len(data)})
    except Exception as e:
        # Fail closed: anything Pillow cannot read is treated as hostile
        return HazardVerdict(True, REASON_DECODE_ERROR, {
            "error": f"{type(e).__name__}: {str(e)[:100]}",
            "size_bytes": len(data),
        })


__all__ = [
    "FrameSample",
    "GifDecodeError",
    "HazardVerdict",
    "analyze_gif",
    "classify_flashing",
    "luminance",
    "oversized_verdict",
    "read_header",
]
