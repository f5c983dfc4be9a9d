import pytest

from bounceclassic.graphics import KEY_LEFT, KEY_RIGHT, Canvas, Timers
from bounceclassic.levels import (
    BACK_BUTTON_X,
    BACK_BUTTON_Y,
    BLOCK_HEIGHT,
    BLOCK_WIDTH,
    BUTTON_GAP,
    BUTTON_H,
    BUTTON_W,
    BUTTON_X,
    BUTTON_Y,
    ENEMY_LEFT_BOUND,
    ENEMY_RIGHT_BOUND,
    ENEMY_SIZE,
    GRAVITY,
    ITEM_POINTS,
    JUMP_SPEED,
    LEVEL_BUTTON_X,
    LEVEL_BUTTON_Y,
    LEVEL_TIME,
    MAX_LINE,
    MAX_NAME_LENGTH,
    MAX_ROWS,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    START_LIVES,
    START_X,
    START_Y,
    STEP,
    TOTAL_LEVELS,
    Enemy,
    GameState,
    LevelsGame,
)


def write_map(directory, name, lines):
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="latin-1")
    return path


@pytest.fixture
def game(tmp_path):
    return LevelsGame(assets=tmp_path, high_score_path=tmp_path / "highscore.txt")


def test_load_map_counts_items_and_columns(game, tmp_path):
    game.load_map(write_map(tmp_path, "m.txt", ["#*..*", "@...."]))
    assert game.total_items == 2
    assert game.map_cols == 5
    assert game.map_rows == 2
    assert "".join(game.map[0]) == "#*..*"


def test_marker_position_steps_by_block(game, tmp_path):
    game.load_map(write_map(tmp_path, "a.txt", ["@..."]))
    first = (game.ball_x, game.ball_y)
    game.load_map(write_map(tmp_path, "b.txt", [".@.."]))
    assert game.ball_x - first[0] == BLOCK_WIDTH
    assert game.ball_y == first[1]
    game.load_map(write_map(tmp_path, "c.txt", ["....", "@..."]))
    assert game.ball_y - first[1] == -BLOCK_HEIGHT
    assert game.ball_x % BLOCK_WIDTH == BLOCK_WIDTH // 2


def test_load_map_resets_motion_and_enemy(game, tmp_path):
    game.camera_x = 300.0
    game.ball_dy = 5.0
    game.enemy = Enemy(x=500.0, direction=-1)
    game.load_map(write_map(tmp_path, "m.txt", ["...."]))
    assert game.camera_x == 0
    assert game.ball_dy == 0
    assert game.enemy == Enemy()


def test_missing_map_raises_and_keeps_state(game, tmp_path):
    game.load_map(write_map(tmp_path, "m.txt", ["#*"]))
    with pytest.raises(FileNotFoundError):
        game.load_map(tmp_path / "absent.txt")
    assert game.total_items == 1
    assert game.map_cols == 2


def test_long_lines_are_split(game, tmp_path):
    game.load_map(write_map(tmp_path, "m.txt", ["#" * 150]))
    assert game.map_rows == 2
    assert len(game.map[0]) == MAX_LINE
    assert len(game.map[1]) == 150 - MAX_LINE


def test_rows_are_capped(game, tmp_path):
    game.load_map(write_map(tmp_path, "m.txt", ["." * 5] * (MAX_ROWS + 5)))
    assert game.map_rows == MAX_ROWS


def test_enemy_turns_at_bounds():
    right = Enemy(x=ENEMY_RIGHT_BOUND - 1, direction=1)
    right.update()
    assert right.x == ENEMY_RIGHT_BOUND
    assert right.direction == -1
    left = Enemy(x=ENEMY_LEFT_BOUND + 1, direction=-1)
    left.update()
    assert left.x == ENEMY_LEFT_BOUND
    assert left.direction == 1


def test_enemy_moves_by_speed():
    enemy = Enemy()
    start = enemy.x
    enemy.update()
    assert enemy.x == start + enemy.speed


def test_camera_follows_and_clamps(game, tmp_path):
    game.load_map(write_map(tmp_path, "m.txt", ["." * 80]))
    game.ball_x = START_X
    game.update_camera()
    assert game.camera_x == 0
    game.ball_x = 1500.0
    game.update_camera()
    assert game.ball_x - game.camera_x == SCREEN_WIDTH / 2
    game.ball_x = 80.0 * BLOCK_WIDTH
    game.update_camera()
    assert game.camera_x + SCREEN_WIDTH == game.map_cols * BLOCK_WIDTH


def test_is_colliding_with_block(game, tmp_path):
    game.load_map(write_map(tmp_path, "m.txt", ["#@...."]))
    assert game.is_colliding(game.ball_x - BLOCK_WIDTH, game.ball_y)
    assert not game.is_colliding(game.ball_x + 3 * BLOCK_WIDTH, game.ball_y)
    assert not game.is_colliding(game.ball_x, game.ball_y)


def test_update_physics_falls_freely(game):
    y = game.ball_y
    game.update_physics()
    assert game.ball_y == y
    assert game.ball_dy == pytest.approx(GRAVITY)
    assert game.on_ground is False
    game.update_physics()
    assert game.ball_y < y


def test_update_physics_lands_on_block(game, tmp_path):
    game.load_map(write_map(tmp_path, "m.txt", ["@", "#"]))
    y = game.ball_y
    game.ball_dy = -10.0
    game.update_physics()
    assert game.on_ground is True
    assert game.ball_dy == 0
    assert game.ball_y == y


def test_collect_item(game, tmp_path):
    game.load_map(write_map(tmp_path, "m.txt", ["@*", "*."]))
    game.collect_items()
    assert game.score == 0
    game.ball_x += BLOCK_WIDTH
    game.collect_items()
    assert game.score == ITEM_POINTS
    assert game.map[0][1] == "."
    assert game.total_items == 1
    assert game.current_level == 1


def test_clearing_map_loads_next_level(game, tmp_path):
    write_map(tmp_path, "maps/level2.txt", ["..@.*"])
    game.load_map(write_map(tmp_path, "m.txt", ["@*"]))
    game.ball_x += BLOCK_WIDTH
    game.collect_items()
    assert game.current_level == 2
    assert game.map_cols == 5
    assert game.total_items == 1


def test_clearing_last_level_wins_and_saves(game, tmp_path):
    game.load_map(write_map(tmp_path, "m.txt", ["@*"]))
    game.current_level = TOTAL_LEVELS
    game.state = GameState.GAME
    game.ball_x += BLOCK_WIDTH
    game.collect_items()
    assert game.state is GameState.VICTORY
    assert (tmp_path / "highscore.txt").read_text() == str(ITEM_POINTS)


def test_high_score_round_trip(game, tmp_path):
    (tmp_path / "highscore.txt").write_text(" 42\n")
    game.load_high_score()
    assert game.high_score == 42
    game.score = 10
    game.save_high_score()
    assert (tmp_path / "highscore.txt").read_text() == " 42\n"


def test_high_score_ignores_garbage(game, tmp_path):
    (tmp_path / "highscore.txt").write_text("abc")
    game.load_high_score()
    assert game.high_score == 0


def test_enemy_hit(game):
    game.ball_x, game.ball_y = game.enemy.x, game.enemy.y
    assert game.enemy_hit() is True
    game.ball_x = game.enemy.x + game.ball_radius + ENEMY_SIZE
    assert game.enemy_hit() is False


def test_tick_enemy_costs_a_life(game):
    game.state = GameState.GAME
    game.ball_x, game.ball_y = game.enemy.x, game.enemy.y
    game.tick()
    assert game.lives == START_LIVES - 1
    assert (game.ball_x, game.ball_y) == (START_X, START_Y)
    assert game.current_time == 1


def test_tick_last_life_ends_game(game, tmp_path):
    game.state = GameState.GAME
    game.lives = 1
    game.score = 5
    game.ball_x, game.ball_y = game.enemy.x, game.enemy.y
    game.tick()
    assert game.state is GameState.GAMEOVER
    assert (tmp_path / "highscore.txt").read_text() == "5"


def test_tick_time_runs_out(game):
    game.state = GameState.GAME
    game.current_time = LEVEL_TIME - 1
    game.tick()
    assert game.state is GameState.GAMEOVER
    assert game.current_time == LEVEL_TIME


def test_tick_outside_game_does_nothing(game):
    game.state = GameState.MAIN_MENU
    game.tick()
    assert game.current_time == 0
    assert game.enemy == Enemy()


def test_name_entry(game):
    game.key("\r")
    assert game.state is GameState.ENTER_NAME
    for char in "Al":
        game.key(char)
    game.key("\b")
    assert game.player_name == "A"
    game.key("\r")
    assert game.state is GameState.MAIN_MENU


def test_name_length_is_capped(game):
    for _ in range(MAX_NAME_LENGTH + 10):
        game.key("x")
    assert len(game.player_name) == MAX_NAME_LENGTH


def test_pause_and_resume(tmp_path):
    timers = Timers()
    timers.add(17, lambda: None)
    game = LevelsGame(timers=timers, assets=tmp_path)
    game.state = GameState.GAME
    game.key("p")
    assert game.state is GameState.PAUSE
    assert timers.is_paused(0) is True
    game.key("R")
    assert game.state is GameState.GAME
    assert timers.is_paused(0) is False


def test_back_key_resets_level(game, tmp_path):
    write_map(tmp_path, "maps/level1.txt", ["@**"])
    game.state = GameState.GAME
    game.score = 30
    game.lives = 1
    game.key("b")
    assert game.state is GameState.MAIN_MENU
    assert game.score == 0
    assert game.lives == START_LIVES
    assert game.total_items == 2


def test_back_key_from_level_selector_keeps_score(game):
    game.state = GameState.LEVEL_SELECTOR
    game.score = 30
    game.key("B")
    assert game.state is GameState.MAIN_MENU
    assert game.score == 30


def test_jump_only_on_ground(game):
    game.state = GameState.GAME
    game.key(" ")
    assert game.ball_dy == 0
    game.on_ground = True
    game.key(" ")
    assert game.ball_dy == JUMP_SPEED
    assert game.on_ground is False


def test_arrow_keys_blocked_by_wall(game, tmp_path):
    game.load_map(write_map(tmp_path, "m.txt", ["#@...."]))
    game.state = GameState.GAME
    x = game.ball_x
    game.special_key(KEY_LEFT)
    assert game.ball_x == x
    game.special_key(KEY_RIGHT)
    assert game.ball_x == x + STEP


def test_click_exit_button(tmp_path):
    calls = []
    game = LevelsGame(assets=tmp_path, on_exit=lambda: calls.append(True))
    game.state = GameState.MAIN_MENU
    game.click(BUTTON_X + 1, SCREEN_HEIGHT - BUTTON_Y)
    assert game.state is GameState.EXIT
    assert calls == [True]


def test_click_start_opens_level_selector(game):
    game.state = GameState.MAIN_MENU
    game.click(BUTTON_X, SCREEN_HEIGHT - (BUTTON_Y + 3 * (BUTTON_H + BUTTON_GAP)))
    assert game.state is GameState.LEVEL_SELECTOR


def test_level_button_starts_from_first_level(game, tmp_path):
    write_map(tmp_path, "maps/level1.txt", ["@*"])
    game.state = GameState.LEVEL_SELECTOR
    game.click(LEVEL_BUTTON_X + 2 * (BUTTON_W + BUTTON_GAP), SCREEN_HEIGHT - LEVEL_BUTTON_Y)
    assert game.state is GameState.GAME
    assert game.current_level == 1
    assert game.total_items == 1


def test_back_button_in_level_selector(game):
    game.state = GameState.LEVEL_SELECTOR
    game.click(BACK_BUTTON_X, SCREEN_HEIGHT - BACK_BUTTON_Y)
    assert game.state is GameState.MAIN_MENU


def test_draw_game_paints_ball_enemy_and_background(game):
    game.state = GameState.GAME
    canvas = Canvas(SCREEN_WIDTH, SCREEN_HEIGHT)
    game.draw(canvas)
    assert canvas.pixel_color(int(game.ball_x), int(game.ball_y)) == (255, 255, 255)
    assert canvas.pixel_color(int(game.enemy.x), int(game.enemy.y)) == (255, 0, 0)
    assert canvas.pixel_color(900, 100) == (0, 0, 200)