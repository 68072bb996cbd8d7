"""
Input Normalization

The fixed contract every caller follows before inference, matching the
distribution the recognition weights were trained on:

1. Convert to single-channel grayscale.
2. Rescale pixel values to [0, 1].
3. Fix polarity so glyphs are dark on a light background (invert when the
   border is darker than the interior).
4. Resize to the model height, keeping the aspect ratio.
5. Crop on the right, or pad on the right with background (1.0), to the
   model width.
"""

from dataclasses import dataclass
from typing import Sequence

import cv2
import numpy as np
from PIL import Image


@dataclass(frozen=True)
class NormalizationSpec:
    """Input contract shipped with the model weights."""
    height: int = 32
    width: int = 384
    channels: int = 1
    background: float = 1.0


def _border_mean(gray: np.ndarray) -> float:
    top, bottom = gray[0, :], gray[-1, :]
    left, right = gray[:, 0], gray[:, -1]
    return float(np.concatenate([top, bottom, left, right]).mean())


def normalize_image(image: Image.Image, spec: NormalizationSpec = NormalizationSpec()) -> np.ndarray:
    """
    Normalize a field crop for the recognizer.

    Args:
        image: PIL Image in any mode
        spec: Model input contract

    Returns:
        float32 array of shape (spec.height, spec.width), values in [0, 1]
    """
    gray = np.asarray(image.convert("L"), dtype=np.float32) / 255.0
    h, w = gray.shape
    if h == 0 or w == 0:
        return np.full((spec.height, spec.width), spec.background, dtype=np.float32)

    if h > 2 and w > 2:
        interior = gray[1:-1, 1:-1].mean()
        if _border_mean(gray) < interior:
            gray = 1.0 - gray
    elif gray.mean() < 0.5:
        gray = 1.0 - gray

    new_w = max(1, int(round(w * spec.height / h)))
    interpolation = cv2.INTER_AREA if h > spec.height else cv2.INTER_LINEAR
    resized = cv2.resize(gray, (new_w, spec.height), interpolation=interpolation)

    out = np.full((spec.height, spec.width), spec.background, dtype=np.float32)
    keep = min(new_w, spec.width)
    out[:, :keep] = resized[:, :keep]
    return np.clip(out, 0.0, 1.0)


def to_batch(images: Sequence[Image.Image], spec: NormalizationSpec = NormalizationSpec()) -> np.ndarray:
    """
    Normalize and stack images into an (N, C, H, W) float32 array.
    """
    planes = [normalize_image(image, spec) for image in images]
    batch = np.stack(planes)[:, None, :, :]
    if spec.channels > 1:
        batch = np.repeat(batch, spec.channels, axis=1)
    return batch.astype(np.float32)
