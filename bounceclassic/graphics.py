"""Drawing surface, timers and window loop with a bottom-left origin."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Set, Tuple

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import numpy as np  # noqa: E402
import pygame  # noqa: E402

from bounceclassic.images import Image  # noqa: E402
from bounceclassic.sprites import Sprite  # noqa: E402

MAX_TIMERS = 10
DEFAULT_SLICES = 100
DEFAULT_TEXT_SIZE = 13
DEFAULT_FRAME_LIMIT = 120

KEY_F1, KEY_F2, KEY_F3, KEY_F4, KEY_F5, KEY_F6 = 1, 2, 3, 4, 5, 6
KEY_F7, KEY_F8, KEY_F9, KEY_F10, KEY_F11, KEY_F12 = 7, 8, 9, 10, 11, 12
KEY_LEFT, KEY_UP, KEY_RIGHT, KEY_DOWN = 100, 101, 102, 103
KEY_PAGE_UP, KEY_PAGE_DOWN, KEY_HOME, KEY_END, KEY_INSERT = 104, 105, 106, 107, 108

LEFT_BUTTON, MIDDLE_BUTTON, RIGHT_BUTTON = 0, 1, 2
BUTTON_DOWN, BUTTON_UP = 0, 1

_SPECIAL_KEYS: Dict[int, int] = {
    pygame.K_F1: KEY_F1,
    pygame.K_F2: KEY_F2,
    pygame.K_F3: KEY_F3,
    pygame.K_F4: KEY_F4,
    pygame.K_F5: KEY_F5,
    pygame.K_F6: KEY_F6,
    pygame.K_F7: KEY_F7,
    pygame.K_F8: KEY_F8,
    pygame.K_F9: KEY_F9,
    pygame.K_F10: KEY_F10,
    pygame.K_F11: KEY_F11,
    pygame.K_F12: KEY_F12,
    pygame.K_LEFT: KEY_LEFT,
    pygame.K_UP: KEY_UP,
    pygame.K_RIGHT: KEY_RIGHT,
    pygame.K_DOWN: KEY_DOWN,
    pygame.K_PAGEUP: KEY_PAGE_UP,
    pygame.K_PAGEDOWN: KEY_PAGE_DOWN,
    pygame.K_HOME: KEY_HOME,
    pygame.K_END: KEY_END,
    pygame.K_INSERT: KEY_INSERT,
}

_MOUSE_BUTTONS = {1: LEFT_BUTTON, 2: MIDDLE_BUTTON, 3: RIGHT_BUTTON}

Point = Tuple[float, float]


class TimerLimitError(RuntimeError):
    """Raised when more than the allowed number of timers is registered."""


@dataclass
class _Timer:
    callback: Callable[[], None]
    delay: int
    due: int
    paused: bool = False


class Timers:
    """Periodic callbacks driven by a millisecond clock."""

    def __init__(self) -> None:
        self._timers: List[_Timer] = []
        self._now = 0

    def __len__(self) -> int:
        return len(self._timers)

    def add(self, msec: int, callback: Callable[[], None]) -> int:
        """Register ``callback`` to run every ``msec`` milliseconds; return its index."""
        if len(self._timers) >= MAX_TIMERS:
            raise TimerLimitError("maximum number of timers reached")
        self._timers.append(_Timer(callback, msec, self._now + msec))
        return len(self._timers) - 1

    def pause(self, index: int) -> None:
        if 0 <= index < len(self._timers):
            self._timers[index].paused = True

    def resume(self, index: int) -> None:
        if 0 <= index < len(self._timers):
            self._timers[index].paused = False

    def is_paused(self, index: int) -> bool:
        return self._timers[index].paused

    def advance(self, now_ms: int) -> List[int]:
        """Run every due, unpaused timer once; return the indices that ran."""
        self._now = now_ms
        fired = []
        for index, timer in list(enumerate(self._timers)):
            if timer.due > now_ms:
                continue
            if not timer.paused:
                timer.callback()
                fired.append(index)
            timer.due = now_ms + timer.delay
        return fired


class KeyState:
    """Which keys are currently held down."""

    def __init__(self) -> None:
        self._pressed: Set[Hashable] = set()

    def press(self, key: Hashable) -> None:
        self._pressed.add(key)

    def release(self, key: Hashable) -> None:
        self._pressed.discard(key)

    def is_pressed(self, key: Hashable) -> bool:
        return key in self._pressed


class FpsCounter:
    """Frames per second, recomputed once more than a second has passed."""

    def __init__(self) -> None:
        self.frame_count = 0
        self.previous_time = 0
        self.fps = 0

    def frame(self, now_ms: int) -> int:
        """Count one frame at ``now_ms`` and return the current rate."""
        self.frame_count += 1
        interval = now_ms - self.previous_time
        if interval > 1000:
            self.fps = int(self.frame_count * 1000.0 / interval)
            self.previous_time = now_ms
            self.frame_count = 0
        return self.fps

    @property
    def label(self) -> str:
        return f"FPS: {self.fps}"


def ellipse_points(
    x: float, y: float, a: float, b: float, slices: int = DEFAULT_SLICES
) -> List[Point]:
    """Points tracing an ellipse, starting at (x + a, y)."""
    if slices <= 0:
        raise ValueError(f"slices must be positive, got {slices}")
    dt = 2 * math.pi / slices
    points: List[Point] = [(x + a, y)]
    t = 0.0
    while t <= 2 * math.pi:
        points.append((x + a * math.cos(t), y + b * math.sin(t)))
        t += dt
    return points


def rectangle_points(left: float, bottom: float, dx: float, dy: float) -> List[Point]:
    """Corners of a rectangle, counter-clockwise from (left, bottom)."""
    right, top = left + dx, bottom + dy
    return [(left, bottom), (right, bottom), (right, top), (left, top)]


def _image_surface(pixels: np.ndarray) -> pygame.Surface:
    """Build a surface from bottom-up pixel rows."""
    channels = pixels.shape[2]
    if channels == 1:
        pixels = np.repeat(pixels, 3, axis=2)
    elif channels == 2:
        pixels = np.concatenate(
            [np.repeat(pixels[..., :1], 3, axis=2), pixels[..., 1:]], axis=2
        )
    fmt = "RGBA" if pixels.shape[2] == 4 else "RGB"
    height, width = pixels.shape[:2]
    top_down = np.ascontiguousarray(pixels[::-1])
    return pygame.image.frombytes(top_down.tobytes(), (width, height), fmt)


class Canvas:
    """A drawing surface whose origin is the bottom-left corner."""

    def __init__(
        self,
        width: int = 500,
        height: int = 500,
        surface: Optional[pygame.Surface] = None,
    ) -> None:
        self.surface = surface if surface is not None else pygame.Surface((width, height))
        self.color: Tuple[int, int, int, int] = (255, 255, 255, 255)
        self.line_width = 1
        self._fonts: Dict[int, pygame.font.Font] = {}

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()

    def _screen(self, x: float, y: float) -> Point:
        return (x, self.height - y)

    def _paint(self, painter: Callable[[pygame.Surface, tuple], None]) -> None:
        r, g, b, a = self.color
        if a >= 255:
            painter(self.surface, (r, g, b))
            return
        overlay = pygame.Surface(self.surface.get_size(), pygame.SRCALPHA)
        painter(overlay, (r, g, b, a))
        self.surface.blit(overlay, (0, 0))

    def set_color(self, r: int, g: int, b: int, alpha: float = 1.0) -> None:
        """Set the drawing colour; ``alpha`` runs from 0 (invisible) to 1."""
        a = max(0, min(255, round(alpha * 255)))
        self.color = (int(r) & 0xFF, int(g) & 0xFF, int(b) & 0xFF, a)

    def clear(self) -> None:
        self.surface.fill((0, 0, 0))

    def point(self, x: float, y: float, size: int = 0) -> None:
        pixels = [(int(x), int(y))]
        pixels.extend(
            (i, j)
            for i in range(int(x - size), math.ceil(x + size))
            for j in range(int(y - size), math.ceil(y + size))
        )

        def paint(surface: pygame.Surface, color: tuple) -> None:
            for px, py in pixels:
                pygame.draw.rect(surface, color, (px, self.height - 1 - py, 1, 1))

        self._paint(paint)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        start, end = self._screen(x1, y1), self._screen(x2, y2)
        self._paint(
            lambda surface, color: pygame.draw.line(
                surface, color, start, end, self.line_width
            )
        )

    def _outline(self, points: Sequence[Point], closed: bool) -> None:
        screen = [self._screen(px, py) for px, py in points]
        self._paint(
            lambda surface, color: pygame.draw.lines(
                surface, color, closed, screen, self.line_width
            )
        )

    def _fill(self, points: Sequence[Point]) -> None:
        screen = [self._screen(px, py) for px, py in points]
        self._paint(lambda surface, color: pygame.draw.polygon(surface, color, screen))

    def polygon(self, xs: Sequence[float], ys: Sequence[float]) -> None:
        """Outline of a closed polygon; fewer than three vertices draws nothing."""
        points = list(zip(xs, ys))
        if len(points) < 3:
            return
        self._outline(points, closed=True)

    def filled_polygon(self, xs: Sequence[float], ys: Sequence[float]) -> None:
        points = list(zip(xs, ys))
        if len(points) < 3:
            return
        self._fill(points)

    def rectangle(self, left: float, bottom: float, dx: float, dy: float) -> None:
        self._outline(rectangle_points(left, bottom, dx, dy), closed=True)

    def filled_rectangle(self, left: float, bottom: float, dx: float, dy: float) -> None:
        self._fill(rectangle_points(left, bottom, dx, dy))

    def circle(self, x: float, y: float, r: float, slices: int = DEFAULT_SLICES) -> None:
        self.ellipse(x, y, r, r, slices)

    def filled_circle(
        self, x: float, y: float, r: float, slices: int = DEFAULT_SLICES
    ) -> None:
        self.filled_ellipse(x, y, r, r, slices)

    def ellipse(
        self, x: float, y: float, a: float, b: float, slices: int = DEFAULT_SLICES
    ) -> None:
        self._outline(ellipse_points(x, y, a, b, slices), closed=False)

    def filled_ellipse(
        self, x: float, y: float, a: float, b: float, slices: int = DEFAULT_SLICES
    ) -> None:
        points = ellipse_points(x, y, a, b, slices)[:-1]
        if len(points) >= 3:
            self._fill(points)

    def _font(self, size: int) -> pygame.font.Font:
        if not pygame.font.get_init():
            pygame.font.init()
        font = self._fonts.get(size)
        if font is None:
            font = self._fonts[size] = pygame.font.Font(None, size)
        return font

    def text(self, x: float, y: float, text: str, size: int = DEFAULT_TEXT_SIZE) -> None:
        """Draw ``text`` with its baseline starting at (x, y)."""
        font = self._font(size)
        r, g, b, a = self.color
        rendered = font.render(text, True, (r, g, b))
        if a < 255:
            rendered.set_alpha(a)
        top = self.height - y - font.get_ascent()
        self.surface.blit(rendered, (round(x), round(top)))

    def show_image(
        self, x: int, y: int, image: Image, ignore_color: Optional[int] = None
    ) -> None:
        """Draw ``image`` with its bottom-left corner at (x, y)."""
        clipped = image.clip(int(x), int(y), self.width, self.height, ignore_color)
        if clipped is None:
            return
        draw_x, draw_y, pixels = clipped
        surface = _image_surface(pixels)
        self.surface.blit(surface, (draw_x, self.height - draw_y - pixels.shape[0]))

    def show_sprite(self, sprite: Sprite) -> None:
        frame = sprite.frame
        if frame is None:
            return
        self.show_image(sprite.x, sprite.y, frame, sprite.ignore_color)

    def pixel_color(self, x: int, y: int) -> Tuple[int, int, int]:
        """RGB colour of the pixel at (x, y)."""
        color = self.surface.get_at((int(x), self.height - 1 - int(y)))
        return (color.r, color.g, color.b)


class Application:
    """A window that runs timers, dispatches input and redraws every frame."""

    def __init__(
        self,
        width: int = 500,
        height: int = 500,
        title: str = "iGraphics",
        *,
        draw: Optional[Callable[[Canvas], None]] = None,
        keyboard: Optional[Callable[[str], None]] = None,
        special_keyboard: Optional[Callable[[int], None]] = None,
        mouse: Optional[Callable[[int, int, int, int], None]] = None,
        mouse_move: Optional[Callable[[int, int], None]] = None,
        mouse_drag: Optional[Callable[[int, int], None]] = None,
        mouse_wheel: Optional[Callable[[int, int, int], None]] = None,
        frame_limit: int = DEFAULT_FRAME_LIMIT,
    ) -> None:
        self.width = width
        self.height = height
        self.title = title
        self.draw = draw
        self.keyboard = keyboard
        self.special_keyboard = special_keyboard
        self.mouse = mouse
        self.mouse_move = mouse_move
        self.mouse_drag = mouse_drag
        self.mouse_wheel = mouse_wheel
        self.frame_limit = frame_limit
        self.timers = Timers()
        self.keys = KeyState()
        self.special_keys = KeyState()
        self.mouse_x = 0
        self.mouse_y = 0
        self.running = False
        self._chars: Dict[int, str] = {}

    def _set_mouse(self, pos: Tuple[int, int]) -> None:
        self.mouse_x = pos[0]
        self.mouse_y = self.height - pos[1]

    def handle_event(self, event: pygame.event.Event) -> None:
        """Dispatch one input event to the registered callbacks."""
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.KEYDOWN:
            special = _SPECIAL_KEYS.get(event.key)
            if special is not None:
                if self.special_keyboard:
                    self.special_keyboard(special)
                self.special_keys.press(special)
            elif event.unicode and ord(event.unicode) < 256:
                self._chars[event.key] = event.unicode
                if self.keyboard:
                    self.keyboard(event.unicode)
                self.keys.press(event.unicode)
        elif event.type == pygame.KEYUP:
            special = _SPECIAL_KEYS.get(event.key)
            if special is not None:
                self.special_keys.release(special)
            else:
                char = self._chars.pop(event.key, None)
                if char is not None:
                    self.keys.release(char)
        elif event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP):
            button = _MOUSE_BUTTONS.get(event.button)
            if button is None:
                return
            self._set_mouse(event.pos)
            state = BUTTON_DOWN if event.type == pygame.MOUSEBUTTONDOWN else BUTTON_UP
            if self.mouse:
                self.mouse(button, state, self.mouse_x, self.mouse_y)
        elif event.type == pygame.MOUSEMOTION:
            self._set_mouse(event.pos)
            handler = self.mouse_drag if any(event.buttons) else self.mouse_move
            if handler:
                handler(self.mouse_x, self.mouse_y)
        elif event.type == pygame.MOUSEWHEEL:
            if event.y and self.mouse_wheel:
                direction = 1 if event.y > 0 else -1
                self.mouse_wheel(direction, self.mouse_x, self.mouse_y)

    def stop(self) -> None:
        self.running = False

    def run(self) -> None:
        """Open the window and loop until it is closed."""
        pygame.init()
        try:
            screen = pygame.display.set_mode((self.width, self.height))
            pygame.display.set_caption(self.title)
            canvas = Canvas(surface=screen)
            canvas.clear()
            clock = pygame.time.Clock()
            self.running = True
            while self.running:
                for event in pygame.event.get():
                    self.handle_event(event)
                if not self.running:
                    break
                self.timers.advance(pygame.time.get_ticks())
                if self.draw:
                    self.draw(canvas)
                pygame.display.flip()
                clock.tick(self.frame_limit)
        finally:
            pygame.quit()