"""Scrolling tile-map platformer with button menus, lives, a countdown and a high score."""

from __future__ import annotations

import enum
import math
import re
import sys
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

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
from bounceclassic.levels import _read_map_lines

import pygame  # noqa: E402  (imported after graphics, which configures it)

PathLike = Union[str, Path]

SCREEN_WIDTH = 1000
SCREEN_HEIGHT = 600
TITLE = "Bounce Classic"
BLOCK_SIZE = 50
MAX_ROWS = 20
MAX_COLS = 100
MAX_NAME_LENGTH = 49
TOTAL_LEVELS = 4
FPS = 60
TIMER_DELAY_MS = 1000 // FPS
LEVEL_TIME = 5 * 60 * FPS

START_LIVES = 3
ITEM_POINTS = 10
ITEM_RADIUS = 10
START_X, START_Y = 100.0, 300.0
BALL_RADIUS = 20.0
GRAVITY = -0.2
JUMP_SPEED = 8.0
STEP = 10
ENEMY_SIZE = 20
ENEMY_LEFT_BOUND = 200.0
ENEMY_RIGHT_BOUND = 600.0

BLOCK_IMAGE = "block.bmp"
HIGH_SCORE_FILE = "highscore.txt"

MEDIUM_TEXT, LARGE_TEXT = 18, 24
OVERLAY_ALPHA_PAUSE = 150 / 255
OVERLAY_ALPHA = 200 / 255


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


@dataclass(frozen=True)
class Button:
    """A rectangular button with its bottom-left corner at (x, y)."""

    x: int
    y: int
    w: int
    h: int
    text: str = ""

    def contains(self, x: float, y: float) -> bool:
        """True when (x, y), in drawing coordinates, lies on the button or its edge."""
        return self.x <= x <= self.x + self.w and self.y <= y <= self.y + self.h


@dataclass
class Enemy:
    """An enemy patrolling back and forth between two x positions."""

    x: float = 300.0
    y: float = 300.0
    dir: int = 1
    speed: float = 2.0

    def update(self) -> None:
        """Move one step, turning around at the patrol bounds."""
        self.x += self.speed * self.dir
        if self.x < ENEMY_LEFT_BOUND:
            self.x = ENEMY_LEFT_BOUND
            self.dir = 1
        elif self.x > ENEMY_RIGHT_BOUND:
            self.x = ENEMY_RIGHT_BOUND
            self.dir = -1


MAIN_MENU_BUTTONS: Tuple[Button, ...] = (
    Button(100, 250, 200, 50, "Start Game"),
    Button(100, 190, 200, 50, "Instructions"),
    Button(100, 130, 200, 50, "Settings"),
    Button(100, 70, 200, 50, "Exit"),
)

SELECTOR_BACK_BUTTON = Button(10, 10, 200, 50, "Back to Menu")
MENU_BACK_BUTTON = Button(SCREEN_WIDTH // 2 - 100, 50, 200, 50, "Back to Menu")

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

# Menu button index -> state it leads to; None exits the game.
_MENU_TARGETS: Tuple[Optional[GameState], ...] = (
    GameState.LEVEL_SELECTOR,
    GameState.INSTRUCTIONS,
    GameState.SETTINGS,
    None,
)


def level_buttons() -> List[Button]:
    """The level selector's buttons, two per row."""
    return [
        Button(350 + (i % 2) * 250, 350 - (i // 2) * 100, 200, 50, f"Level {i + 1}")
        for i in range(TOTAL_LEVELS)
    ]


_fonts: Dict[int, "pygame.font.Font"] = {}


def _text_width(text: str, size: int) -> int:
    if not pygame.font.get_init():
        pygame.font.init()
        _fonts.clear()
    font = _fonts.get(size)
    if font is None:
        font = _fonts[size] = pygame.font.Font(None, size)
    return font.size(text)[0]


def _name_char_allowed(key: str) -> bool:
    return len(key) == 1 and ((key.isascii() and key.isalnum()) or key == " ")


class CampaignGame:
    """State and rules of the campaign game; drawing goes to a Canvas."""

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
        self.player_name = ""
        self.score = 0
        self.high_score = 0
        self.lives = START_LIVES
        self.ball_x = START_X
        self.ball_y = START_Y
        self.ball_radius = BALL_RADIUS
        self.ball_dy = 0.0
        self.gravity = GRAVITY
        self.on_ground = False
        self.camera_x = 0.0
        self.enemy = Enemy()
        self.level_time = LEVEL_TIME
        self.current_time = 0
        self.current_level = 1
        self.total_items = 0
        self.map: List[List[str]] = []
        self.map_cols = 0
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
        """Store the score and adopt it as the high score when it beats it."""
        if self.score <= self.high_score:
            return
        try:
            self.high_score_path.write_text(str(self.score), encoding="latin-1")
        except OSError as exc:
            print(f"failed to save high score: {exc}", file=sys.stderr)
            return
        self.high_score = self.score

    def load_map(self, path: PathLike) -> None:
        """Load a tile map; '#' is a block, '*' an item and '@' the start position."""
        with open(path, encoding="latin-1", newline="\n") as handle:
            rows = [list(line) for line in islice(_read_map_lines(handle), MAX_ROWS)]
        self.total_items = 0
        for i, row in enumerate(rows):
            for j, cell in enumerate(row):
                if cell == "@":
                    self.ball_x = float(j * BLOCK_SIZE + BLOCK_SIZE // 2)
                    self.ball_y = float(
                        SCREEN_HEIGHT - (i + 1) * BLOCK_SIZE + BLOCK_SIZE // 2
                    )
                if cell == "*":
                    self.total_items += 1
        self.map = rows
        self.map_cols = len(rows[0]) if rows else 0
        self.camera_x = 0.0
        self.ball_dy = 0.0

    def _load_level(self, level: int) -> None:
        path = self.assets / "maps" / f"level{level}.txt"
        try:
            self.load_map(path)
        except OSError:
            print(f"Failed to load map file: {path}", file=sys.stderr)

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
                    yield i, j, j * BLOCK_SIZE, SCREEN_HEIGHT - (i + 1) * BLOCK_SIZE

    def update_camera(self) -> None:
        """Centre the view on the ball, kept within the map."""
        self.camera_x = self.ball_x - SCREEN_WIDTH // 2
        if self.camera_x < 0:
            self.camera_x = 0.0
        max_camera_x = self.map_cols * BLOCK_SIZE - SCREEN_WIDTH
        if self.camera_x > max_camera_x:
            self.camera_x = float(max_camera_x)

    def is_colliding(self, x: float, y: float) -> bool:
        """True when a ball centred at (x, y) overlaps any block."""
        r = self.ball_radius
        return any(
            x + r > left
            and x - r < left + BLOCK_SIZE
            and y + r > bottom
            and y - r < bottom + BLOCK_SIZE
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
            cx = left + BLOCK_SIZE // 2
            cy = bottom + BLOCK_SIZE // 2
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
            elif len(self.player_name) < MAX_NAME_LENGTH and _name_char_allowed(key):
                self.player_name += key
            return

        if key in ("b", "B"):
            if self.state in _BACK_TO_MENU:
                self.reset_level()
                self.state = GameState.MAIN_MENU
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
        elif key == " ":
            if self.state is GameState.GAME and self.on_ground:
                self.ball_dy = JUMP_SPEED
                self.on_ground = False
        elif key in ("e", "E"):
            if self.state is GameState.MAIN_MENU:
                self.state = GameState.EASTER_EGG

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

    def _exit(self) -> None:
        if self.on_exit is not None:
            self.on_exit()
        else:
            raise SystemExit(0)

    def click(self, x: int, y: int) -> None:
        """Handle a left-button press; buttons are matched against SCREEN_HEIGHT - y."""
        flipped = SCREEN_HEIGHT - y
        if self.state is GameState.MAIN_MENU:
            for button, target in zip(MAIN_MENU_BUTTONS, _MENU_TARGETS):
                if button.contains(x, flipped):
                    if target is None:
                        self._exit()
                    else:
                        self.state = target
                    return
        elif self.state is GameState.LEVEL_SELECTOR:
            for level, button in enumerate(level_buttons(), start=1):
                if button.contains(x, flipped):
                    self.current_level = level
                    self.reset_level()
                    self.state = GameState.GAME
                    return
            if SELECTOR_BACK_BUTTON.contains(x, flipped):
                self.state = GameState.MAIN_MENU
        elif self.state in (GameState.INSTRUCTIONS, GameState.SETTINGS):
            if MENU_BACK_BUTTON.contains(x, flipped):
                self.state = GameState.MAIN_MENU

    def mouse(self, button: int, state: int, x: int, y: int) -> None:
        if button == LEFT_BUTTON and state == BUTTON_DOWN:
            self.click(x, y)

    # --- drawing -----------------------------------------------------------

    def _draw_buttons(self, canvas: Canvas, buttons: Sequence[Button]) -> None:
        for i, btn in enumerate(buttons):
            canvas.set_color(0, 100 + i * 50, 200 - i * 50)
            canvas.filled_rectangle(btn.x, btn.y, btn.w, btn.h)
            canvas.set_color(0, 0, 0)
            width = _text_width(btn.text, MEDIUM_TEXT)
            canvas.text(
                btn.x + (btn.w - width) // 2, btn.y + btn.h // 2 - 7, btn.text, MEDIUM_TEXT
            )

    def _draw_map(self, canvas: Canvas) -> None:
        for i, row in enumerate(self.map):
            bottom = SCREEN_HEIGHT - (i + 1) * BLOCK_SIZE
            for j, cell in enumerate(row[: self.map_cols]):
                screen_x = j * BLOCK_SIZE - self.camera_x
                if cell == "#":
                    block = self._image(BLOCK_IMAGE)
                    if block is not None and block.width > 0:
                        canvas.show_image(int(screen_x), bottom, block)
                    else:
                        canvas.set_color(100, 100, 100)
                        canvas.filled_rectangle(screen_x, bottom, BLOCK_SIZE, BLOCK_SIZE)
                elif cell == "*":
                    canvas.set_color(255, 215, 0)
                    canvas.filled_circle(
                        screen_x + BLOCK_SIZE // 2, bottom + BLOCK_SIZE // 2, ITEM_RADIUS
                    )

    def _draw_ui(self, canvas: Canvas) -> None:
        canvas.set_color(255, 255, 255)
        canvas.text(10, SCREEN_HEIGHT - 30, f"Score: {self.score}", MEDIUM_TEXT)
        canvas.text(10, SCREEN_HEIGHT - 60, f"Lives: {self.lives}", MEDIUM_TEXT)
        if self.player_name:
            canvas.text(
                10, SCREEN_HEIGHT - 90, f"Player: {self.player_name}", MEDIUM_TEXT
            )
        time_left = (self.level_time - self.current_time) // FPS
        canvas.text(
            SCREEN_WIDTH - 150, SCREEN_HEIGHT - 30, f"Time Left: {time_left}", MEDIUM_TEXT
        )

    def _background(self, canvas: Canvas, color: Tuple[int, int, int], alpha: float = 1.0) -> None:
        canvas.set_color(*color, alpha)
        canvas.filled_rectangle(0, 0, SCREEN_WIDTH, SCREEN_HEIGHT)

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
            self._background(canvas, (0, 0, 100))
            canvas.set_color(255, 255, 255)
            canvas.text(half_w - 100, 500, "BOUNCE CLASSIC", LARGE_TEXT)
            self._draw_buttons(canvas, MAIN_MENU_BUTTONS)
        elif state is GameState.LEVEL_SELECTOR:
            self._background(canvas, (0, 0, 150))
            canvas.set_color(255, 255, 255)
            canvas.text(half_w - 120, 550, "SELECT LEVEL", LARGE_TEXT)
            self._draw_buttons(canvas, level_buttons())
            self._draw_buttons(canvas, [SELECTOR_BACK_BUTTON])
        elif state is GameState.GAME:
            self._background(canvas, (0, 0, 200))
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
            self._background(canvas, (0, 0, 100))
            canvas.set_color(255, 255, 255)
            canvas.text(100, 550, "INSTRUCTIONS:", LARGE_TEXT)
            lines = (
                "- Use LEFT and RIGHT arrow keys to move",
                "- Press SPACE to jump",
                "- Collect all items (*) to win",
                "- Avoid the red enemy blocks",
                "- Press 'P' to pause the game",
                "- Press 'B' to return to menu",
            )
            for index, line in enumerate(lines):
                canvas.text(100, 500 - 30 * index, line, MEDIUM_TEXT)
            self._draw_buttons(canvas, [MENU_BACK_BUTTON])
        elif state is GameState.SETTINGS:
            self._background(canvas, (0, 0, 100))
            canvas.set_color(255, 255, 255)
            canvas.text(half_w - 100, 400, "SETTINGS MENU", LARGE_TEXT)
            canvas.text(half_w - 150, 350, "Coming in future update!", MEDIUM_TEXT)
            self._draw_buttons(canvas, [MENU_BACK_BUTTON])
        elif state is GameState.PAUSE:
            self._background(canvas, (0, 0, 0), OVERLAY_ALPHA_PAUSE)
            canvas.set_color(255, 255, 0)
            canvas.text(half_w - 70, half_h + 20, "GAME PAUSED", LARGE_TEXT)
            canvas.text(
                half_w - 150, half_h - 20, "Press 'R' to resume or 'B' for menu", MEDIUM_TEXT
            )
        elif state is GameState.GAMEOVER:
            self._background(canvas, (0, 0, 0), OVERLAY_ALPHA)
            canvas.set_color(255, 0, 0)
            canvas.text(half_w - 100, half_h + 30, "GAME OVER", LARGE_TEXT)
            canvas.text(half_w - 80, half_h - 20, f"Final Score: {self.score}", MEDIUM_TEXT)
            canvas.text(half_w - 150, half_h - 60, "Press 'B' to return to menu", MEDIUM_TEXT)
        elif state is GameState.VICTORY:
            self._background(canvas, (0, 0, 0), OVERLAY_ALPHA)
            canvas.set_color(0, 255, 0)
            canvas.text(half_w - 70, half_h + 30, "YOU WIN!", LARGE_TEXT)
            canvas.text(half_w - 80, half_h - 20, f"Final Score: {self.score}", MEDIUM_TEXT)
            if self.score == self.high_score:
                canvas.text(half_w - 120, half_h - 60, "NEW HIGH SCORE!", MEDIUM_TEXT)
            canvas.text(half_w - 150, half_h - 100, "Press 'B' to return to menu", MEDIUM_TEXT)
        elif state is GameState.EASTER_EGG:
            self._background(canvas, (0, 0, 0), OVERLAY_ALPHA)
            canvas.set_color(255, 255, 0)
            canvas.text(half_w - 120, half_h + 30, "EASTER EGG FOUND!", LARGE_TEXT)
            canvas.text(
                half_w - 150,
                half_h - 20,
                "Congratulations, you found the secret!",
                MEDIUM_TEXT,
            )
            canvas.text(half_w - 100, half_h - 60, "Press 'B' to return", MEDIUM_TEXT)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Open the game window and play until it is closed."""
    app = Application(SCREEN_WIDTH, SCREEN_HEIGHT, TITLE)
    game = CampaignGame(timers=app.timers, on_exit=app.stop)
    game.load_high_score()
    game._load_level(game.current_level)
    app.timers.add(TIMER_DELAY_MS, game.tick)
    app.draw = game.draw
    app.keyboard = game.key
    app.special_keyboard = game.special_key
    app.mouse = game.mouse
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())