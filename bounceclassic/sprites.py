"""Animated sprites with per-pixel collision masks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from bounceclassic.images import Image, MirrorState, _color_matches, _normalize_color


@dataclass(eq=False)
class Sprite:
    """A positioned sequence of frames; ``ignore_color`` is 0xRRGGBB or None."""

    x: int = 0
    y: int = 0
    ignore_color: Optional[int] = None
    frames: List[Image] = field(default_factory=list)
    current_frame: int = -1
    scale: float = 1.0
    flip_horizontal: bool = False
    flip_vertical: bool = False
    collision_mask: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        self.ignore_color = _normalize_color(self.ignore_color)

    @property
    def total_frames(self) -> int:
        return len(self.frames)

    @property
    def frame(self) -> Optional[Image]:
        """The frame currently shown, or None before frames are set."""
        if not self.frames or self.current_frame < 0:
            return None
        return self.frames[self.current_frame]

    def set_frames(self, frames: Sequence[Image]) -> None:
        """Replace the frames with copies, applying the sprite's scale and flips."""
        if not frames:
            raise ValueError("a sprite needs at least one frame")
        self.frames = [frame.copy() for frame in frames]
        self.current_frame = 0
        self.collision_mask = None
        for frame in self.frames:
            frame.scale(self.scale)
            if self.flip_horizontal:
                frame.mirror(MirrorState.HORIZONTAL)
            if self.flip_vertical:
                frame.mirror(MirrorState.VERTICAL)
        self.update_collision_mask()

    def set_position(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def update_collision_mask(self) -> None:
        """Recompute which pixels of the current frame are solid."""
        frame = self.frame
        if frame is None:
            return
        data = frame.data
        transparent = (
            data[..., 3] == 0
            if frame.channels == 4
            else np.zeros((frame.height, frame.width), dtype=bool)
        )
        self.collision_mask = ~(transparent | _color_matches(data, self.ignore_color))

    def animate(self) -> None:
        """Advance to the next frame, wrapping around."""
        if self.total_frames <= 1 or self.current_frame < 0:
            return
        self.current_frame = (self.current_frame + 1) % self.total_frames
        self.update_collision_mask()

    def scale_by(self, factor: float) -> None:
        """Scale every frame by ``factor``; non-positive factors are ignored."""
        if factor <= 0:
            return
        self.scale *= factor
        for frame in self.frames:
            frame.scale(factor)
        self.update_collision_mask()

    def resize(self, width: int, height: int) -> None:
        for frame in self.frames:
            frame.resize(width, height)
        self.update_collision_mask()

    def mirror(self, state: MirrorState) -> None:
        """Toggle the flip along ``state`` and mirror every frame."""
        if state is MirrorState.HORIZONTAL:
            self.flip_horizontal = not self.flip_horizontal
        elif state is MirrorState.VERTICAL:
            self.flip_vertical = not self.flip_vertical
        for frame in self.frames:
            frame.mirror(state)
        self.update_collision_mask()

    def collides_with(self, other: "Sprite") -> bool:
        return check_collision(self, other)


def check_collision(first: Sprite, second: Sprite) -> bool:
    """True when two sprites overlap on solid pixels.

    Without collision masks the frames' bounding boxes are compared.
    """
    frame1, frame2 = first.frame, second.frame
    if frame1 is None or frame2 is None:
        return False
    start_x = max(first.x, second.x)
    end_x = min(first.x + frame1.width, second.x + frame2.width)
    start_y = max(first.y, second.y)
    end_y = min(first.y + frame1.height, second.y + frame2.height)
    overlap = start_x < end_x and start_y < end_y
    mask1, mask2 = first.collision_mask, second.collision_mask
    if mask1 is None or mask2 is None or not overlap:
        return overlap
    region1 = mask1[start_y - first.y : end_y - first.y, start_x - first.x : end_x - first.x]
    region2 = mask2[
        start_y - second.y : end_y - second.y, start_x - second.x : end_x - second.x
    ]
    return bool(np.any(region1 & region2))