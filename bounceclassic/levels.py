"""Scrolling tile-map platformer with levels, lives, a countdown and a high score."""

from __future__ import annotations

import enum
import math
import os
import re
import sys
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence, TextIO, Tuple, Union

from bounceclassic.graphics import (
    BUTTON_DOWN,
    KEY_LEFT,
    KEY_RIGHT,
    LEFT_BUTTON,
    Application,
    Canvas,
    Timers,
)
from bounceclassic.images import Image, ImageLoadError, load_image

PathLike = Union[str, "os.PathLike[str]"]

SCREEN_WIDTH = 1000
SCREEN_HEIGHT = 600
TITLE = "Bounce Classic"
TIMER_DELAY_MS = 17
TICKS_PER_SECOND = 60
LEVEL_TIME = 60 * 5 * 60

MAX_ROWS = 20
MAX_COLS = 100
MAX_LINE = MAX_COLS - 1
BLOCK_WIDTH = 50
BLOCK_HEIGHT = 50

MAX_NAME_LENGTH = 49
TOTAL_LEVELS = 4
START_LIVES = 3
ITEM_POINTS = 10
ITEM_RADIUS = 10

START_X, START_Y = 100.0, 300.0
BALL_RADIUS = 20.0
GRAVITY = -0.2
JUMP_SPEED = 8.0
STEP = 10

ENEMY_START_X, ENEMY_START_Y = 300.0, 300.0
ENEMY_SPEED = 2.0
ENEMY_SIZE = 20
ENEMY_LEFT_BOUND = 200.0
ENEMY_RIGHT_BOUND = 600.0

BUTTON_X, BUTTON_Y, BUTTON_W, BUTTON_H, BUTTON_GAP = 100, 100, 200, 50, 20
LEVEL_BUTTON_X, LEVEL_BUTTON_Y = 350, 400
BACK_BUTTON_X, BACK_BUTTON_Y = 10, 10

BLOCK_IMAGE = "block.jpg"
HIGH_SCORE_FILE = "highscore.txt"
FIRST_MAP = "maps/level_1.txt"

MEDIUM_TEXT, LARGE_TEXT = 18, 24


class GameState(enum.Enum):
    ENTER_NAME = enum.auto()
    MAIN_MENU = enum.auto()
    LEVEL_SELECTOR = enum.auto()
    GAME = enum.auto()
    INSTRUCTIONS = enum.auto()
    SETTINGS = enum.auto()
    PAUSE = enum.auto()
    GAMEOVER = enum.auto()
    VICTORY = enum.auto()
    EASTER_EGG = enum.auto()
    EXIT = enum.auto()


_BACK_TO_MENU = frozenset(
    {
        GameState.GAME,
        GameState.PAUSE,
        GameState.GAMEOVER,
        GameState.VICTORY,
        GameState.INSTRUCTIONS,
        GameState.SETTINGS,
        GameState.EASTER_EGG,
    }
)

# (label, colour, row counted from the bottom, state it leads to)
_MENU: Sequence[Tuple[str, Tuple[int, int, int], int, GameState]] = (
    ("Start Game", (0, 255, 0), 3, GameState.LEVEL_SELECTOR),
    ("Instructions", (0, 200, 255), 2, GameState.INSTRUCTIONS),
    ("Settings", (255, 165, 0), 1, GameState.SETTINGS),
    ("Exit", (255, 0, 0), 0, GameState.EXIT),
)


def _menu_bottom(row: int) -> int:
    return BUTTON_Y + row * (BUTTON_H + BUTTON_GAP)


def _level_button_left(level: int) -> int:
    return LEVEL_BUTTON_X + (level - 1) * (BUTTON_W + BUTTON_GAP)


def _inside(x: float, y: float, left: int, bottom: int) -> bool:
    return left <= x <= left + BUTTON_W and bottom <= y <= bottom + BUTTON_H


def _read_map_lines(handle: TextIO) -> Iterator[str]:
    """Yield map rows, splitting over-long lines the way a fixed line buffer does."""
    for line in handle:
        for start in range(0, len(line), MAX_LINE):
            chunk = line[start : start + MAX_LINE]
            yield chunk[:-1] if chunk.endswith("\n") else chunk


@dataclass
class Enemy:
    """A guard patrolling back and forth between two x positions."""

    x: float = ENEMY_START_X
    y: float = ENEMY_START_Y
    direction: int = 1
    speed: float = ENEMY_SPEED

    def update(self) -> None:
        self.x += self.speed * self.direction
        if self.x < ENEMY_LEFT_BOUND:
            self.x = ENEMY_LEFT_BOUND
            self.direction = 1
        elif self.x > ENEMY_RIGHT_BOUND:
            self.x = ENEMY_RIGHT_BOUND
            self.direction = -1


class LevelsGame:
    """State and rules of the level-based game; drawing goes to a Canvas."""

    def __init__(
        self,
        *,
        timers: Optional[Timers] = None,
        assets: PathLike = Path("."),
        high_score_path: Optional[PathLike] = None,
        on_exit: Optional[Callable[[], None]] = None,
    ) -> None:
        self.timers = timers
        self.assets = Path(assets)
        self.high_score_path = (
            Path(high_score_path)
            if high_score_path is not None
            else self.assets / HIGH_SCORE_FILE
        )
        self.on_exit = on_exit
        self.state = GameState.ENTER_NAME
        self.ball_x = START_X
        self.ball_y = START_Y
        self.ball_radius = BALL_RADIUS
        self.ball_dy = 0.0
        self.gravity = GRAVITY
        self.on_ground = False
        self.camera_x = 0.0
        self.score = 0
        self.lives = START_LIVES
        self.map: List[List[str]] = []
        self.map_cols = 0
        self.player_name = ""
        self.level_time = LEVEL_TIME
        self.current_time = 0
        self.high_score = 0
        self.current_level = 1
        self.total_items = 0
        self.enemy = Enemy()
        self._images: Dict[str, Optional[Image]] = {}

    @property
    def map_rows(self) -> int:
        return len(self.map)

    # --- persistence -------------------------------------------------------

    def load_high_score(self) -> None:
        """Read the stored high score; a missing or unreadable file changes nothing."""
        try:
            text = self.high_score_path.read_text(encoding="latin-1")
        except OSError:
            return
        match = re.match(r"\s*([+-]?\d+)", text)
        if match:
            self.high_score = int(match.group(1))

    def save_high_score(self) -> None:
        """Store the score when it beats the high score."""
        if self.score <= self.high_score:
            return
        try:
            self.high_score_path.write_text(str(self.score), encoding="latin-1")
        except OSError as exc:
            print(f"failed to save high score: {exc}", file=sys.stderr)

    def load_map(self, path: PathLike) -> None:
        """Load a tile map; '#' is a block, '*' an item and '@' the start position."""
        with open(path, encoding="latin-1", newline="\n") as handle:
            rows = [list(line) for line in islice(_read_map_lines(handle), MAX_ROWS)]
        self.total_items = 0
        for i, row in enumerate(rows):
            for j, cell in enumerate(row):
                if cell == "@":
                    self.ball_x = float(j * BLOCK_WIDTH + BLOCK_WIDTH // 2)
                    self.ball_y = float(
                        SCREEN_HEIGHT - (i + 1) * BLOCK_HEIGHT + BLOCK_HEIGHT // 2
                    )
                if cell == "*":
                    self.total_items += 1
        self.map = rows
        self.map_cols = len(rows[0]) if rows else 0
        self.camera_x = 0.0
        self.ball_dy = 0.0
        self.enemy = Enemy()

    def _load_level(self, level: int) -> None:
        path = self.assets / "maps" / f"level{level}.txt"
        try:
            self.load_map(path)
        except OSError as exc:
            print(f"failed to load map {path}: {exc}", file=sys.stderr)

    def _image(self, relative: str) -> Optional[Image]:
        if relative not in self._images:
            try:
                self._images[relative] = load_image(self.assets / relative)
            except ImageLoadError as exc:
                print(exc, file=sys.stderr)
                self._images[relative] = None
        return self._images[relative]

    # --- rules -------------------------------------------------------------

    def _cells(self, kind: str) -> Iterator[Tuple[int, int, int, int]]:
        """Yield (row, column, left, bottom) for every cell holding ``kind``."""
        for i, row in enumerate(self.map):
            for j, cell in enumerate(row[: self.map_cols]):
                if cell == kind:
                    yield i, j, j * BLOCK_WIDTH, SCREEN_HEIGHT - (i + 1) * BLOCK_HEIGHT

    def update_camera(self) -> None:
        """Centre the view on the ball, kept within the map."""
        self.camera_x = self.ball_x - SCREEN_WIDTH // 2
        if self.camera_x < 0:
            self.camera_x = 0.0
        max_camera_x = self.map_cols * BLOCK_WIDTH - SCREEN_WIDTH
        if self.camera_x > max_camera_x:
            self.camera_x = float(max_camera_x)

    def is_colliding(self, x: float, y: float) -> bool:
        """True when a ball centred at (x, y) overlaps any block."""
        r = self.ball_radius
        return any(
            x + r > left
            and x - r < left + BLOCK_WIDTH
            and y + r > bottom
            and y - r < bottom + BLOCK_HEIGHT
            for _, _, left, bottom in self._cells("#")
        )

    def update_physics(self) -> None:
        next_y = self.ball_y + self.ball_dy
        if not self.is_colliding(self.ball_x, next_y):
            self.ball_y = next_y
            self.ball_dy += self.gravity
            self.on_ground = False
        else:
            self.ball_dy = 0.0
            self.on_ground = True

    def collect_items(self) -> None:
        """Pick up items under the ball; clearing a map moves to the next level."""
        for i, j, left, bottom in list(self._cells("*")):
            cx = left + BLOCK_WIDTH // 2
            cy = bottom + BLOCK_HEIGHT // 2
            if math.hypot(self.ball_x - cx, self.ball_y - cy) >= self.ball_radius + ITEM_RADIUS:
                continue
            self.map[i][j] = "."
            self.score += ITEM_POINTS
            self.total_items -= 1
            if self.total_items == 0:
                self.current_level += 1
                if self.current_level > TOTAL_LEVELS:
                    self.state = GameState.VICTORY
                    self.save_high_score()
                else:
                    self._load_level(self.current_level)
                return

    def enemy_hit(self) -> bool:
        reach = self.ball_radius + ENEMY_SIZE
        return (
            abs(self.ball_x - self.enemy.x) < reach
            and abs(self.ball_y - self.enemy.y) < reach
        )

    def reset_level(self) -> None:
        """Start over from the first level with full lives and no score."""
        self.lives = START_LIVES
        self.score = 0
        self.current_time = 0
        self.current_level = 1
        self._load_level(self.current_level)

    def tick(self) -> None:
        if self.state is not GameState.GAME:
            return
        self.update_physics()
        self.update_camera()
        self.collect_items()
        self.enemy.update()

        if self.enemy_hit():
            self.lives -= 1
            if self.lives <= 0:
                self.state = GameState.GAMEOVER
                self.save_high_score()
            else:
                self.ball_x = START_X
                self.ball_y = START_Y
                self.ball_dy = 0.0
                self.on_ground = False

        self.current_time += 1
        if self.current_time >= self.level_time:
            self.state = GameState.GAMEOVER
            self.save_high_score()

    # --- input -------------------------------------------------------------

    def key(self, key: str) -> None:
        if self.state is GameState.ENTER_NAME:
            if key == "\r":
                if self.player_name:
                    self.state = GameState.MAIN_MENU
            elif key in ("\b", "\x7f"):
                self.player_name = self.player_name[:-1]
            elif len(self.player_name) < MAX_NAME_LENGTH:
                self.player_name += key
            return

        if key in ("b", "B"):
            if self.state in _BACK_TO_MENU:
                self.state = GameState.MAIN_MENU
                self.reset_level()
            elif self.state is GameState.LEVEL_SELECTOR:
                self.state = GameState.MAIN_MENU
        elif key in ("p", "P"):
            if self.state is GameState.GAME:
                if self.timers is not None:
                    self.timers.pause(0)
                self.state = GameState.PAUSE
        elif key in ("r", "R"):
            if self.state is GameState.PAUSE:
                if self.timers is not None:
                    self.timers.resume(0)
                self.state = GameState.GAME
        elif key == " " and self.on_ground and self.state is GameState.GAME:
            self.ball_dy = JUMP_SPEED
            self.on_ground = False

    def special_key(self, key: int) -> None:
        if self.state is not GameState.GAME:
            return
        if key == KEY_LEFT:
            step = -STEP
        elif key == KEY_RIGHT:
            step = STEP
        else:
            return
        next_x = self.ball_x + step
        if not self.is_colliding(next_x, self.ball_y):
            self.ball_x = next_x

    def click(self, x: int, y: int) -> None:
        """Handle a left-button press; the layout is matched against SCREEN_HEIGHT - y."""
        flipped = SCREEN_HEIGHT - y
        if self.state is GameState.MAIN_MENU:
            for _, _, row, target in _MENU:
                if _inside(x, flipped, BUTTON_X, _menu_bottom(row)):
                    self.state = target
                    if target is GameState.EXIT and self.on_exit is not None:
                        self.on_exit()
                    return
        elif self.state is GameState.LEVEL_SELECTOR:
            for level in range(1, TOTAL_LEVELS + 1):
                if _inside(x, flipped, _level_button_left(level), LEVEL_BUTTON_Y):
                    self.current_level = level
                    self.reset_level()
                    self.state = GameState.GAME
            if _inside(x, flipped, BACK_BUTTON_X, BACK_BUTTON_Y):
                self.state = GameState.MAIN_MENU

    def mouse(self, button: int, state: int, x: int, y: int) -> None:
        if button == LEFT_BUTTON and state == BUTTON_DOWN:
            self.click(x, y)

    # --- drawing -----------------------------------------------------------

    def _draw_map(self, canvas: Canvas) -> None:
        for i, row in enumerate(self.map):
            bottom = SCREEN_HEIGHT - (i + 1) * BLOCK_HEIGHT
            for j, cell in enumerate(row):
                left = j * BLOCK_WIDTH
                if cell == "#":
                    block = self._image(BLOCK_IMAGE)
                    if block is not None:
                        canvas.show_image(int(left - self.camera_x), bottom, block)
                elif cell == "*":
                    canvas.set_color(255, 215, 0)
                    canvas.filled_circle(
                        left + BLOCK_WIDTH // 2 - self.camera_x,
                        bottom + BLOCK_HEIGHT // 2,
                        ITEM_RADIUS,
                    )

    def _draw_ui(self, canvas: Canvas) -> None:
        canvas.set_color(255, 255, 255)
        canvas.text(10, SCREEN_HEIGHT - 30, f"Score: {self.score}", MEDIUM_TEXT)
        canvas.text(10, SCREEN_HEIGHT - 60, f"Lives: {self.lives}", MEDIUM_TEXT)
        if self.player_name:
            canvas.text(
                10, SCREEN_HEIGHT - 90, f"Player: {self.player_name}", MEDIUM_TEXT
            )
        time_left = (self.level_time - self.current_time) // TICKS_PER_SECOND
        canvas.text(
            SCREEN_WIDTH - 150, SCREEN_HEIGHT - 30, f"Time Left: {time_left}", MEDIUM_TEXT
        )

    def draw(self, canvas: Canvas) -> None:
        canvas.clear()
        state = self.state
        half_w, half_h = SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2
        if state is GameState.ENTER_NAME:
            canvas.set_color(255, 255, 255)
            canvas.text(400, 350, "Enter Player Name:", LARGE_TEXT)
            canvas.text(400, 300, self.player_name, MEDIUM_TEXT)
            canvas.text(400, 270, "Press Enter to confirm", MEDIUM_TEXT)
        elif state is GameState.MAIN_MENU:
            for label, color, row, _ in _MENU:
                bottom = _menu_bottom(row)
                canvas.set_color(*color)
                canvas.filled_rectangle(BUTTON_X, bottom, BUTTON_W, BUTTON_H)
                canvas.set_color(0, 0, 0)
                canvas.text(BUTTON_X + 70, bottom + 15, label, MEDIUM_TEXT)
        elif state is GameState.LEVEL_SELECTOR:
            canvas.set_color(0, 255, 255)
            canvas.text(400, 550, "Select Level (1 - 4)", LARGE_TEXT)
            for level in range(1, TOTAL_LEVELS + 1):
                left = _level_button_left(level)
                canvas.set_color(100, 200, 255)
                canvas.filled_rectangle(left, LEVEL_BUTTON_Y, BUTTON_W, BUTTON_H)
                canvas.set_color(0, 0, 0)
                canvas.text(left + 70, LEVEL_BUTTON_Y + 15, f"Level {level}", MEDIUM_TEXT)
            canvas.set_color(255, 0, 0)
            canvas.filled_rectangle(BACK_BUTTON_X, BACK_BUTTON_Y, BUTTON_W, BUTTON_H)
            canvas.set_color(0, 0, 0)
            canvas.text(50, 25, "Back to Menu", MEDIUM_TEXT)
        elif state is GameState.GAME:
            canvas.set_color(0, 0, 200)
            canvas.filled_rectangle(0, 0, SCREEN_WIDTH, SCREEN_HEIGHT)
            self._draw_map(canvas)
            canvas.set_color(255, 0, 0)
            canvas.filled_rectangle(
                self.enemy.x - ENEMY_SIZE - self.camera_x,
                self.enemy.y - ENEMY_SIZE,
                2 * ENEMY_SIZE,
                2 * ENEMY_SIZE,
            )
            canvas.set_color(255, 255, 255)
            canvas.filled_circle(self.ball_x - self.camera_x, self.ball_y, self.ball_radius)
            self._draw_ui(canvas)
        elif state is GameState.INSTRUCTIONS:
            canvas.set_color(255, 255, 255)
            canvas.text(100, 550, "Instructions:", LARGE_TEXT)
            canvas.text(100, 510, "- Use LEFT and RIGHT arrow keys to move.", MEDIUM_TEXT)
            canvas.text(100, 480, "- Press SPACE to jump.", MEDIUM_TEXT)
            canvas.text(100, 450, "- Collect all items (*) to win.", MEDIUM_TEXT)
            canvas.text(100, 420, "- Avoid the red enemy blocks.", MEDIUM_TEXT)
            canvas.text(100, 390, "- Press 'b' to return to menu.", MEDIUM_TEXT)
        elif state is GameState.SETTINGS:
            canvas.set_color(255, 255, 255)
            canvas.text(100, 550, "Settings (not implemented)", LARGE_TEXT)
            canvas.text(100, 510, "Press 'b' to return to menu.", MEDIUM_TEXT)
        elif state is GameState.PAUSE:
            canvas.set_color(255, 255, 0)
            canvas.text(half_w - 70, half_h + 20, "Game Paused", LARGE_TEXT)
            canvas.text(
                half_w - 120, half_h - 20, "Press 'r' to Resume or 'b' to Menu", MEDIUM_TEXT
            )
        elif state is GameState.GAMEOVER:
            canvas.set_color(255, 0, 0)
            canvas.text(half_w - 100, half_h, "Game Over! Press 'b' to return.", LARGE_TEXT)
        elif state is GameState.VICTORY:
            canvas.set_color(0, 255, 0)
            canvas.text(half_w - 70, half_h, "You Win! Press 'b' to return.", LARGE_TEXT)
        elif state is GameState.EASTER_EGG:
            canvas.set_color(255, 255, 0)
            canvas.text(half_w - 120, half_h, "You found the Easter Egg!", LARGE_TEXT)
            canvas.text(half_w - 120, half_h - 40, "Press 'b' to return.", MEDIUM_TEXT)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Open the game window and play until it is closed."""
    app = Application(SCREEN_WIDTH, SCREEN_HEIGHT, TITLE)
    game = LevelsGame(timers=app.timers, on_exit=app.stop)
    game.load_high_score()
    try:
        game.load_map(FIRST_MAP)
    except OSError as exc:
        print(f"failed to load map {FIRST_MAP}: {exc}", file=sys.stderr)
    app.timers.add(TIMER_DELAY_MS, game.tick)
    app.draw = game.draw
    app.keyboard = game.key
    app.special_keyboard = game.special_key
    app.mouse = game.mouse
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())