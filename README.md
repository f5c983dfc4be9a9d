# bounceclassic

A small bouncing-ball platformer in three variants, together with the little
2D toolkit it is built on: images held as numpy arrays, sprites with
pixel-accurate collision, timers, a drawing canvas whose origin is the
bottom-left corner, and a sound mixer. Windows, input and sound go through
pygame.

## Installing

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Playing

Every command reads its files relative to the current working directory.
A missing image, map or sound is reported on standard error and the game
carries on without it.

### `bounce-classic`

```
bounce-classic
```

A single screen with five platforms. Click **Start** on the main menu, then
collect the coins (50 points each), avoid the spike and the patrolling enemy,
and reach the goal in the top right corner. Falling to the bottom of the
screen ends the game.

- Left / right arrows move the ball, space jumps when standing on a platform.
- `b` returns to the main menu.
- `p` and `r` pause and resume the game timer.

It draws `wallpaper/wallpaper.bmp` behind the menu and `wallpaper/level1.bmp`
behind the level, loops `assets/sounds/game_audio.wav` as music and plays
`assets/sounds/chime.wav` when a coin is taken.

### `bounce-levels`

```
bounce-levels
```

A scrolling version played on tile maps. You first type a player name and
press Enter, then choose **Start Game** and one of four levels. Collect every
item (`*`) in a level to move on to the next; after level 4 you win. You have
three lives and five minutes; touching the red enemy costs a life. Arrow keys
move, space jumps, `p` pauses, `r` resumes, `b` goes back to the menu (and
starts over from level 1).

At start-up it loads `maps/level_1.txt`; choosing a level, going back to the
menu, or finishing a level loads `maps/level1.txt` to `maps/level4.txt`.
Blocks are drawn with `block.jpg`. The best score is kept in `highscore.txt`.

### `bounce-campaign`

```
bounce-campaign
```

The same scrolling game with a button menu, back buttons on the instruction
and settings screens, a name entry limited to letters, digits and spaces,
and a secret screen reached by pressing `e` on the main menu. Blocks are drawn
with `block.bmp`, or as grey squares when that image cannot be loaded. It
loads `maps/level1.txt` at start-up and shows "NEW HIGH SCORE!" on the victory
screen when the score equals the stored best.

### Map files

Each line of a map is a row of 50-pixel blocks, top row first; at most 20
rows are read.

| Character     | Meaning         |
|---------------|-----------------|
| `#`           | solid block     |
| `*`           | item to collect |
| `@`           | player start    |
| anything else | empty space     |

### What the games do not do

- The settings screens only show a placeholder; there is nothing to set.
- `bounce-levels` and `bounce-campaign` play no sound.
- In `bounce-levels` and `bounce-campaign` the menu buttons are matched
  against the click position mirrored top to bottom, so a button answers to
  clicks at the mirrored height in the window rather than on itself.

## Using the toolkit

- `bounceclassic.images` — `Image` (pixel data of shape
  `(height, width, channels)`, row 0 at the bottom) with `copy`, `wrap`,
  `resize`, `scale`, `mirror` and `clip`; `MirrorState`; `load_image`,
  `frames_from_sheet`, `load_frames_from_sheet`, `load_frames_from_folder`.
  Unreadable files raise `ImageLoadError`.
- `bounceclassic.sprites` — `Sprite` with `set_frames`, `set_position`,
  `animate`, `scale_by`, `resize`, `mirror`, `update_collision_mask` and
  `collides_with`; `check_collision` tests two sprites on their solid pixels,
  or on their bounding boxes when a sprite has no collision mask.
- `bounceclassic.graphics` — `Canvas` (lines, polygons, rectangles, circles,
  ellipses, text, images, sprites, `pixel_color`), `Timers` (at most ten;
  one more raises `TimerLimitError`), `KeyState`, `FpsCounter`,
  `Application` (the window loop), and the geometry helpers
  `ellipse_points` and `rectangle_points`.
- `bounceclassic.sound` — `SoundMixer` (play, volume in percent, pause,
  resume, stop, usable as a context manager; failures raise `SoundError`)
  and `percent_to_volume`.

```python
from bounceclassic.images import load_frames_from_sheet
from bounceclassic.sprites import Sprite, check_collision

hero = Sprite(ignore_color=0xFF00FF)
hero.set_frames(load_frames_from_sheet("hero.png", 1, 4))
hero.set_position(100, 50)
hero.animate()

wall = Sprite()
wall.set_frames(load_frames_from_sheet("wall.png", 1, 1))
print(check_collision(hero, wall))
```

```python
from bounceclassic.graphics import Canvas

canvas = Canvas(200, 100)
canvas.set_color(255, 0, 0)
canvas.filled_rectangle(10, 10, 50, 20)
print(canvas.pixel_color(20, 15))  # (255, 0, 0)
```