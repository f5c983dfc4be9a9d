"""Raster images held as numpy arrays, with the transforms sprites rely on."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

MAX_FOLDER_FRAMES = 1024

PathLike = Union[str, "os.PathLike[str]"]


class ImageLoadError(OSError):
    """Raised when an image file cannot be read or decoded."""


class MirrorState(enum.Enum):
    """Axis along which an image is mirrored."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def _normalize_color(color: Optional[int]) -> Optional[int]:
    """Return a 0xRRGGBB colour, or None when no colour is given (None or -1)."""
    if color is None or color == -1:
        return None
    return int(color)


def _color_matches(data: np.ndarray, color: Optional[int]) -> np.ndarray:
    """Boolean (height, width) mask of pixels whose RGB equals ``color``."""
    color = _normalize_color(color)
    height, width, channels = data.shape
    if color is None:
        return np.zeros((height, width), dtype=bool)
    zeros = np.zeros((height, width), dtype=np.uint8)
    red = data[..., 0]
    green = data[..., 1] if channels > 1 else zeros
    blue = data[..., 2] if channels > 2 else zeros
    return (
        (red == (color >> 16) & 0xFF)
        & (green == (color >> 8) & 0xFF)
        & (blue == color & 0xFF)
    )


def _resample(data: np.ndarray, new_width: int, new_height: int) -> np.ndarray:
    """Bilinear resampling with pixel-centre alignment and edge clamping."""
    height, width, _ = data.shape

    def axis(size: int, new_size: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        coords = (np.arange(new_size) + 0.5) * size / new_size - 0.5
        coords = np.clip(coords, 0, size - 1)
        low = np.floor(coords).astype(np.intp)
        high = np.minimum(low + 1, size - 1)
        return low, high, coords - low

    x0, x1, fx = axis(width, new_width)
    y0, y1, fy = axis(height, new_height)
    src = data.astype(np.float64)
    fx = fx[None, :, None]
    fy = fy[:, None, None]

    def blend_rows(rows: np.ndarray) -> np.ndarray:
        return rows[:, x0] * (1.0 - fx) + rows[:, x1] * fx

    result = blend_rows(src[y0]) * (1.0 - fy) + blend_rows(src[y1]) * fy
    return np.clip(np.rint(result), 0, 255).astype(np.uint8)


@dataclass(eq=False)
class Image:
    """Pixel data of shape (height, width, channels); row 0 is the bottom row."""

    data: np.ndarray

    def __post_init__(self) -> None:
        array = np.array(self.data, dtype=np.uint8)
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3 or not 1 <= array.shape[2] <= 4:
            raise ValueError(
                f"image data must have shape (height, width, 1..4), got {array.shape}"
            )
        self.data = array

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def channels(self) -> int:
        return self.data.shape[2]

    def copy(self) -> "Image":
        """Return an independent copy of this image."""
        return Image(self.data.copy())

    def wrap(self, dx: int) -> None:
        """Shift the image horizontally by ``dx`` pixels, wrapping around the edges."""
        if self.width == 0:
            return
        self.data = np.roll(self.data, dx % self.width, axis=1)

    def resize(self, width: int, height: int) -> None:
        """Resample the image to ``width`` x ``height`` pixels."""
        if width <= 0 or height <= 0:
            raise ValueError(f"cannot resize to {width}x{height}")
        if (width, height) == (self.width, self.height):
            return
        self.data = _resample(self.data, width, height)

    def scale(self, factor: float) -> None:
        """Resize by ``factor``; a factor that is not positive leaves the image alone."""
        if factor <= 0:
            return
        self.resize(int(self.width * factor), int(self.height * factor))

    def mirror(self, state: MirrorState) -> None:
        """Flip the image left-right (HORIZONTAL) or top-bottom (VERTICAL)."""
        if state is MirrorState.HORIZONTAL:
            self.data = self.data[:, ::-1].copy()
        elif state is MirrorState.VERTICAL:
            self.data = self.data[::-1].copy()
        else:
            raise ValueError(f"unknown mirror state: {state!r}")

    def clip(
        self,
        x: int,
        y: int,
        screen_width: int,
        screen_height: int,
        ignore_color: Optional[int] = None,
    ) -> Optional[Tuple[int, int, np.ndarray]]:
        """Cut out the part of the image visible on screen when drawn at (x, y).

        Returns ``(draw_x, draw_y, pixels)`` or None when nothing is visible.
        Pixels matching ``ignore_color`` (0xRRGGBB) are zeroed, alpha included.
        """
        start_x = start_y = 0
        draw_x, draw_y = x, y
        draw_width, draw_height = self.width, self.height
        if x < 0:
            start_x = -x
            draw_x = 0
            draw_width -= start_x
        if y < 0:
            start_y = -y
            draw_y = 0
            draw_height -= start_y
        if draw_x + draw_width > screen_width:
            draw_width = screen_width - draw_x
        if draw_y + draw_height > screen_height:
            draw_height = screen_height - draw_y
        if draw_width <= 0 or draw_height <= 0:
            return None
        region = self.data[
            start_y : start_y + draw_height, start_x : start_x + draw_width
        ].copy()
        region[_color_matches(region, ignore_color)] = 0
        return draw_x, draw_y, region


def load_image(path: PathLike) -> Image:
    """Load an image file with its rows ordered bottom-up."""
    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    import pygame

    try:
        surface = pygame.image.load(os.fspath(path))
    except (pygame.error, OSError) as exc:
        raise ImageLoadError(f"failed to load image {path}: {exc}") from exc
    fmt = "RGBA" if surface.get_flags() & pygame.SRCALPHA else "RGB"
    raw = pygame.image.tobytes(surface, fmt, True)
    width, height = surface.get_size()
    data = np.frombuffer(raw, dtype=np.uint8).reshape(height, width, len(fmt))
    return Image(data)


def frames_from_sheet(sheet: Image, rows: int, cols: int) -> List[Image]:
    """Split a sprite sheet into ``rows * cols`` equal frames, row by row."""
    if rows <= 0 or cols <= 0:
        raise ValueError(f"sheet grid must be positive, got {rows}x{cols}")
    frame_width = sheet.width // cols
    frame_height = sheet.height // rows
    frames = []
    for index in range(rows * cols):
        row, col = divmod(index, cols)
        top = row * frame_height
        left = col * frame_width
        frames.append(
            Image(sheet.data[top : top + frame_height, left : left + frame_width])
        )
    return frames


def load_frames_from_sheet(path: PathLike, rows: int, cols: int) -> List[Image]:
    """Load a sprite sheet from a file and split it into frames."""
    return frames_from_sheet(load_image(path), rows, cols)


def load_frames_from_folder(folder: PathLike) -> List[Image]:
    """Load every file in ``folder`` (subdirectories skipped) in name order."""
    folder = Path(folder)
    names: List[str] = []
    with os.scandir(folder) as entries:
        for entry in entries:
            if len(names) >= MAX_FOLDER_FRAMES:
                break
            if entry.is_dir():
                continue
            names.append(entry.name)
    return [load_image(folder / name) for name in sorted(names)]