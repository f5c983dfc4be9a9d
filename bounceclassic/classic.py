"""Single-screen platform game: collect coins, dodge hazards, reach the goal."""

from __future__ import annotations

import enum
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

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
from bounceclassic.sound import SoundError, SoundMixer

SCREEN_WIDTH = 1000
SCREEN_HEIGHT = 600
TITLE = "Bounce Classic"
TIMER_DELAY_MS = 5

COLLECTOR_X: Tuple[int, ...] = (152, 352, 552, 752, 902)
COLLECTOR_Y: Tuple[int, ...] = (125, 205, 285, 365, 445)
COLLECTOR_SIZE = 20
INITIAL_VISIBLE: Tuple[bool, ...] = (True, True, True, False, False)
COLLECT_POINTS = 50

BUTTON_X, BUTTON_Y, BUTTON_W, BUTTON_H, BUTTON_GAP = 100, 100, 200, 50, 20

START_X, START_Y = 100.0, 400.0
RESET_X, RESET_Y = 100.0, 300.0
BALL_RADIUS = 20.0
GRAVITY = -0.2
JUMP_SPEED = 8.0
STEP = 10

PLATFORM_X: Tuple[int, ...] = (100, 300, 500, 700, 850)
PLATFORM_Y: Tuple[int, ...] = (100, 180, 260, 340, 420)
PLATFORM_W, PLATFORM_H = 120, 20

SPIKE_X, SPIKE_Y, SPIKE_W, SPIKE_H = 600, 260, 30, 30

ENEMY_START_X, ENEMY_Y, ENEMY_W, ENEMY_H = 300, 260, 30, 30
ENEMY_SPEED = 2
ENEMY_RANGE = 100

GOAL_X, GOAL_Y, GOAL_W, GOAL_H = 970, 460, 40, 20

WALLPAPER = "wallpaper/wallpaper.bmp"
LEVEL_IMAGE = "wallpaper/level1.bmp"
CHIME_SOUND = "assets/sounds/chime.wav"
MUSIC_SOUND = "assets/sounds/game_audio.wav"

SMALL_TEXT, MEDIUM_TEXT, LARGE_TEXT = 12, 18, 24


class GameState(enum.Enum):
    MAIN_MENU = enum.auto()
    GAME = enum.auto()
    INSTRUCTIONS = enum.auto()
    SETTINGS = enum.auto()
    PAUSE = enum.auto()
    GAMEOVER = enum.auto()
    VICTORY = enum.auto()
    EXIT = enum.auto()
    GAME_OVER = enum.auto()


# (label, background colour, text offset, state it leads to)
_MENU: Sequence[Tuple[str, Tuple[int, int, int], int, GameState]] = (
    ("Start", (0, 255, 0), 70, GameState.GAME),
    ("Instructions", (0, 200, 255), 40, GameState.INSTRUCTIONS),
    ("Settings", (255, 165, 0), 60, GameState.SETTINGS),
    ("Exit", (255, 0, 0), 70, GameState.EXIT),
)


def _button_left(index: int) -> int:
    return BUTTON_X + index * (BUTTON_W + BUTTON_GAP)


def _boxes_touch(
    ball_x: float, ball_y: float, radius: float, left: int, bottom: int, w: int, h: int
) -> bool:
    return (
        ball_x + radius >= left
        and ball_x - radius <= left + w
        and ball_y + radius >= bottom
        and ball_y - radius <= bottom + h
    )


class ClassicGame:
    """State and rules of the game; drawing goes to a Canvas."""

    def __init__(
        self,
        *,
        timers: Optional[Timers] = None,
        sound: Optional[SoundMixer] = None,
        assets: Path = Path("."),
        on_exit: Optional[Callable[[], None]] = None,
    ) -> None:
        self.timers = timers
        self.sound = sound
        self.assets = Path(assets)
        self.on_exit = on_exit
        self.state = GameState.MAIN_MENU
        self.music_playing = False
        self.score = 0
        self.collector_visible: List[bool] = list(INITIAL_VISIBLE)
        self.ball_x = START_X
        self.ball_y = START_Y
        self.ball_radius = BALL_RADIUS
        self.ball_dy = 0.0
        self.gravity = GRAVITY
        self.on_ground = False
        self.enemy_x = ENEMY_START_X
        self.enemy_dir = 1
        self._images: Dict[str, Optional[Image]] = {}

    def _play(self, relative: str, loop: bool) -> None:
        if self.sound is None:
            return
        try:
            self.sound.play(str(self.assets / relative), loop)
        except SoundError as exc:
            print(exc, file=sys.stderr)

    def _image(self, relative: str) -> Optional[Image]:
        if relative not in self._images:
            try:
                self._images[relative] = load_image(self.assets / relative)
            except ImageLoadError as exc:
                print(exc, file=sys.stderr)
                self._images[relative] = None
        return self._images[relative]

    def update_ball(self) -> None:
        """Apply gravity, then resolve coins, platforms, hazards and the goal."""
        self.ball_dy += self.gravity
        self.ball_y += self.ball_dy
        self.on_ground = False

        reach = self.ball_radius + COLLECTOR_SIZE // 2
        for index, (cx, cy) in enumerate(zip(COLLECTOR_X, COLLECTOR_Y)):
            if not self.collector_visible[index]:
                continue
            dx = int(self.ball_x - cx)
            dy = int(self.ball_y - cy)
            if dx * dx + dy * dy <= reach * reach:
                self.collector_visible[index] = False
                self.score += COLLECT_POINTS
                self._play(CHIME_SOUND, False)

        for px, py in zip(PLATFORM_X, PLATFORM_Y):
            bottom = self.ball_y - self.ball_radius
            if py <= bottom <= py + PLATFORM_H and px <= self.ball_x <= px + PLATFORM_W:
                self.ball_y = py + PLATFORM_H + self.ball_radius
                self.ball_dy = 0.0
                self.on_ground = True

        if self.ball_y <= 0:
            self.state = GameState.GAME_OVER

        hazards = (
            (self.enemy_x, ENEMY_Y, ENEMY_W, ENEMY_H),
            (SPIKE_X, SPIKE_Y, SPIKE_W, SPIKE_H),
        )
        for left, bottom, w, h in hazards:
            if _boxes_touch(self.ball_x, self.ball_y, self.ball_radius, left, bottom, w, h):
                self.state = GameState.GAME_OVER

        if (
            GOAL_X <= self.ball_x <= GOAL_X + GOAL_W
            and GOAL_Y <= self.ball_y <= GOAL_Y + GOAL_H
        ):
            self.state = GameState.VICTORY

    def update_enemy(self) -> None:
        """Move the enemy along its patrol, turning at either end."""
        self.enemy_x += self.enemy_dir * ENEMY_SPEED
        if self.enemy_x > ENEMY_START_X + ENEMY_RANGE or self.enemy_x < ENEMY_START_X:
            self.enemy_dir = -self.enemy_dir

    def tick(self) -> None:
        if self.state is GameState.GAME:
            self.update_ball()
            self.update_enemy()

    def key(self, key: str) -> None:
        if key == "b":
            self.state = GameState.MAIN_MENU
            self.ball_x = RESET_X
            self.ball_y = RESET_Y
            self.ball_dy = 0.0
        if key in ("p", "P") and self.timers is not None:
            self.timers.pause(0)
        if key == " " and self.on_ground:
            self.ball_dy = JUMP_SPEED
            self.on_ground = False
        if key in ("r", "R") and self.timers is not None:
            self.timers.resume(0)

    def special_key(self, key: int) -> None:
        if key == KEY_LEFT:
            self.ball_x -= STEP
        if key == KEY_RIGHT:
            self.ball_x += STEP

    def click(self, x: int, y: int) -> None:
        """Handle a left-button press at (x, y)."""
        if self.state is not GameState.MAIN_MENU:
            return
        if not BUTTON_Y <= y <= BUTTON_Y + BUTTON_H:
            return
        for index, (_, _, _, target) in enumerate(_MENU):
            left = _button_left(index)
            if left <= x <= left + BUTTON_W:
                if target is GameState.GAME:
                    self.score = 0
                    self.collector_visible = [True] * len(COLLECTOR_X)
                self.state = target
                if target is GameState.EXIT and self.on_exit is not None:
                    self.on_exit()
                return

    def mouse(self, button: int, state: int, x: int, y: int) -> None:
        if button == LEFT_BUTTON and state == BUTTON_DOWN:
            self.click(x, y)

    def _show(self, canvas: Canvas, relative: str) -> None:
        image = self._image(relative)
        if image is not None:
            canvas.show_image(0, 0, image)

    def draw(self, canvas: Canvas) -> None:
        canvas.clear()
        self._show(canvas, WALLPAPER)
        if not self.music_playing:
            self._play(MUSIC_SOUND, True)
            self.music_playing = True

        state = self.state
        if state is GameState.MAIN_MENU:
            for index, (label, color, offset, _) in enumerate(_MENU):
                left = _button_left(index)
                canvas.set_color(*color)
                canvas.filled_rectangle(left, BUTTON_Y, BUTTON_W, BUTTON_H)
                canvas.set_color(0, 0, 0)
                canvas.text(left + offset, BUTTON_Y + 15, label, MEDIUM_TEXT)
        elif state is GameState.GAME:
            self._draw_game(canvas)
        elif state is GameState.INSTRUCTIONS:
            canvas.set_color(0, 0, 0)
            canvas.text(100, 400, "Instructions:", LARGE_TEXT)
            canvas.text(
                100, 370, "- Use LEFT and RIGHT arrow keys to move the paddle.", MEDIUM_TEXT
            )
            canvas.text(100, 340, "- Prevent the ball from falling below.", MEDIUM_TEXT)
            canvas.text(100, 310, "- Press 'b' to return to the Main Menu.", MEDIUM_TEXT)
        elif state is GameState.SETTINGS:
            canvas.set_color(0, 0, 0)
            canvas.text(100, 400, "Settings (to be implemented)", LARGE_TEXT)
            canvas.text(100, 360, "Press 'b' to return to the Main Menu.", MEDIUM_TEXT)
        elif state is GameState.GAME_OVER:
            canvas.set_color(255, 0, 0)
            canvas.text(200, 250, "Game Over! Press 'b' to return.", LARGE_TEXT)
        elif state is GameState.PAUSE:
            canvas.set_color(223, 168, 32)
            canvas.text(420, 300, "Game Paused", LARGE_TEXT)
            canvas.text(370, 260, "Press 'r' to Resume or 'b' to go to Menu.", MEDIUM_TEXT)
        elif state is GameState.VICTORY:
            canvas.set_color(0, 255, 0)
            canvas.text(200, 250, "You Win! Press 'b' to return.", LARGE_TEXT)

    def _draw_game(self, canvas: Canvas) -> None:
        canvas.clear()
        self._show(canvas, LEVEL_IMAGE)
        self.update_ball()
        self.update_enemy()
        canvas.rectangle(0, 0, SCREEN_WIDTH, SCREEN_HEIGHT)

        canvas.set_color(234, 213, 45)
        for visible, cx, cy in zip(self.collector_visible, COLLECTOR_X, COLLECTOR_Y):
            if visible:
                canvas.filled_circle(cx, cy, COLLECTOR_SIZE // 2)

        canvas.set_color(234, 123, 33)
        canvas.text(850, 560, f"Score: {self.score}", MEDIUM_TEXT)
        canvas.set_color(255, 255, 255)
        canvas.text(40, 40, f"Final Score: {self.score}", MEDIUM_TEXT)

        canvas.set_color(255, 0, 0)
        canvas.filled_circle(self.ball_x, self.ball_y, self.ball_radius)

        canvas.set_color(150, 75, 0)
        for px, py in zip(PLATFORM_X, PLATFORM_Y):
            canvas.filled_rectangle(px, py, PLATFORM_W, PLATFORM_H)

        canvas.set_color(0, 0, 255)
        canvas.filled_rectangle(self.enemy_x, ENEMY_Y, ENEMY_W, ENEMY_H)

        canvas.set_color(255, 0, 255)
        canvas.filled_polygon(
            [SPIKE_X, SPIKE_X + SPIKE_W // 2, SPIKE_X + SPIKE_W],
            [SPIKE_Y, SPIKE_Y + SPIKE_H, SPIKE_Y],
        )

        canvas.set_color(0, 255, 0)
        canvas.circle(GOAL_X, GOAL_Y, GOAL_H)

        canvas.set_color(244, 54, 123)
        canvas.filled_rectangle(self.enemy_x, ENEMY_Y, ENEMY_W, ENEMY_H)

        canvas.set_color(0, 0, 0)
        canvas.text(
            10,
            460,
            "Use arrow keys to move, space to jump. Press 'b' to go back.",
            SMALL_TEXT,
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Open the game window and play until it is closed."""
    app = Application(SCREEN_WIDTH, SCREEN_HEIGHT, TITLE)
    try:
        mixer: Optional[SoundMixer] = SoundMixer()
    except SoundError as exc:
        print(exc, file=sys.stderr)
        mixer = None
    game = ClassicGame(timers=app.timers, sound=mixer, on_exit=app.stop)
    app.timers.add(TIMER_DELAY_MS, game.tick)
    app.draw = game.draw
    app.keyboard = game.key
    app.special_keyboard = game.special_key
    app.mouse = game.mouse
    try:
        app.run()
    finally:
        if mixer is not None:
            mixer.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())