import pytest

from bounceclassic import campaign
from bounceclassic.campaign import (
    BLOCK_SIZE,
    GRAVITY,
    ITEM_POINTS,
    JUMP_SPEED,
    MAX_NAME_LENGTH,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    START_LIVES,
    START_X,
    START_Y,
    TOTAL_LEVELS,
    Button,
    CampaignGame,
    Enemy,
    GameState,
    level_buttons,
)
from bounceclassic.graphics import KEY_LEFT, KEY_RIGHT, Canvas, Timers


def write_map(path, lines):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def game(tmp_path):
    return CampaignGame(assets=tmp_path)


def playing(game, tmp_path, lines):
    game.load_map(write_map(tmp_path / "current.txt", lines))
    game.state = GameState.GAME
    return game


def test_button_contains_edges():
    button = Button(10, 20, 30, 40)
    assert button.contains(10, 20)
    assert button.contains(40, 60)
    assert not button.contains(9, 30)
    assert not button.contains(20, 61)


def test_level_buttons_layout():
    buttons = level_buttons()
    assert [b.text for b in buttons] == [f"Level {i}" for i in range(1, TOTAL_LEVELS + 1)]
    assert (buttons[0].x, buttons[0].y) == (350, 350)
    assert buttons[0].y == buttons[1].y
    assert buttons[0].x == buttons[2].x
    assert all(b.w == 200 and b.h == 50 for b in buttons)


def test_load_map_reads_start_and_items(game, tmp_path):
    game.camera_x = 123.0
    game.ball_dy = 5.0
    game.load_map(write_map(tmp_path / "m.txt", ["..*..", ".@.*."]))
    assert game.map_rows == 2
    assert game.map_cols == 5
    assert game.total_items == 2
    assert game.ball_x == BLOCK_SIZE + BLOCK_SIZE // 2
    assert game.ball_y == SCREEN_HEIGHT - 2 * BLOCK_SIZE + BLOCK_SIZE // 2
    assert game.camera_x == 0.0
    assert game.ball_dy == 0.0


def test_load_map_missing_file_raises(game, tmp_path):
    with pytest.raises(OSError):
        game.load_map(tmp_path / "absent.txt")


def test_name_entry_filters_and_confirms(game):
    game.key("\r")
    assert game.state is GameState.ENTER_NAME
    for ch in "Ab 1!-":
        game.key(ch)
    assert game.player_name == "Ab 1"
    game.key("\b")
    assert game.player_name == "Ab "
    game.key("\r")
    assert game.state is GameState.MAIN_MENU


def test_name_length_limited(game):
    for _ in range(MAX_NAME_LENGTH + 5):
        game.key("x")
    assert len(game.player_name) == MAX_NAME_LENGTH


def test_easter_egg_only_from_menu(game):
    game.state = GameState.MAIN_MENU
    game.key("e")
    assert game.state is GameState.EASTER_EGG
    game.state = GameState.LEVEL_SELECTOR
    game.key("E")
    assert game.state is GameState.LEVEL_SELECTOR


def test_back_key_resets_and_returns_to_menu(game, tmp_path):
    write_map(tmp_path / "maps" / "level1.txt", ["@.*"])
    game.state = GameState.GAME
    game.score = 70
    game.lives = 1
    game.current_level = 3
    game.key("b")
    assert game.state is GameState.MAIN_MENU
    assert (game.score, game.lives, game.current_level) == (0, START_LIVES, 1)
    assert game.total_items == 1


def test_pause_and_resume_control_timer(tmp_path):
    timers = Timers()
    timers.add(16, lambda: None)
    game = CampaignGame(assets=tmp_path, timers=timers)
    game.state = GameState.GAME
    game.key("p")
    assert game.state is GameState.PAUSE
    assert timers.is_paused(0)
    game.key("r")
    assert game.state is GameState.GAME
    assert not timers.is_paused(0)


def test_jump_requires_ground(game, tmp_path):
    playing(game, tmp_path, ["@.."])
    game.key(" ")
    assert game.ball_dy == 0.0
    game.on_ground = True
    game.key(" ")
    assert game.ball_dy == JUMP_SPEED
    assert not game.on_ground


def test_physics_free_fall(game, tmp_path):
    playing(game, tmp_path, ["..."])
    y = game.ball_y
    game.update_physics()
    assert game.ball_y == y
    assert game.ball_dy == pytest.approx(GRAVITY)
    game.update_physics()
    assert game.ball_y == pytest.approx(y + GRAVITY)
    assert not game.on_ground


def test_physics_lands_on_block(game, tmp_path):
    playing(game, tmp_path, ["@.", "#."])
    y = game.ball_y
    game.ball_dy = -10.0
    game.update_physics()
    assert game.on_ground
    assert game.ball_dy == 0.0
    assert game.ball_y == y


def test_special_keys_blocked_by_blocks(game, tmp_path):
    playing(game, tmp_path, ["@#"])
    x = game.ball_x
    game.special_key(KEY_RIGHT)
    assert game.ball_x == x
    game.special_key(KEY_LEFT)
    assert game.ball_x == x - campaign.STEP


def test_special_keys_ignored_outside_game(game, tmp_path):
    game.load_map(write_map(tmp_path / "m.txt", ["@.."]))
    x = game.ball_x
    game.special_key(KEY_RIGHT)
    assert game.ball_x == x


def test_collect_item(game, tmp_path):
    playing(game, tmp_path, ["@**"])
    game.ball_x += BLOCK_SIZE
    game.collect_items()
    assert game.score == ITEM_POINTS
    assert game.total_items == 1
    assert game.map[0][1] == "."


def test_clearing_map_loads_next_level(game, tmp_path):
    write_map(tmp_path / "maps" / "level2.txt", ["#@*#"])
    playing(game, tmp_path, ["@*"])
    game.ball_x += BLOCK_SIZE
    game.collect_items()
    assert game.current_level == 2
    assert game.map == [list("#@*#")]
    assert game.total_items == 1


def test_clearing_last_level_wins_and_saves(game, tmp_path):
    playing(game, tmp_path, ["@*"])
    game.current_level = TOTAL_LEVELS
    game.ball_x += BLOCK_SIZE
    game.collect_items()
    assert game.state is GameState.VICTORY
    assert game.high_score == ITEM_POINTS
    assert game.high_score_path.read_text() == str(ITEM_POINTS)


def test_high_score_round_trip(tmp_path):
    first = CampaignGame(assets=tmp_path)
    first.score = 42
    first.save_high_score()
    second = CampaignGame(assets=tmp_path)
    second.load_high_score()
    assert second.high_score == 42
    second.score = 5
    second.save_high_score()
    assert second.high_score_path.read_text() == "42"


def test_enemy_hit_costs_life_then_game_over(game, tmp_path):
    playing(game, tmp_path, ["."])
    game.ball_x, game.ball_y = game.enemy.x, game.enemy.y
    game.tick()
    assert game.lives == START_LIVES - 1
    assert (game.ball_x, game.ball_y) == (START_X, START_Y)
    game.lives = 1
    game.score = 30
    game.ball_x, game.ball_y = game.enemy.x, game.enemy.y
    game.tick()
    assert game.state is GameState.GAMEOVER
    assert game.high_score == 30


def test_time_out_ends_game(game, tmp_path):
    playing(game, tmp_path, ["."])
    game.current_time = game.level_time - 1
    game.tick()
    assert game.state is GameState.GAMEOVER


def test_tick_does_nothing_outside_game(game):
    game.state = GameState.MAIN_MENU
    game.tick()
    assert game.current_time == 0


def test_camera_clamped(game, tmp_path):
    game.load_map(write_map(tmp_path / "m.txt", ["." * 40]))
    game.ball_x = START_X
    game.update_camera()
    assert game.camera_x == 0.0
    game.ball_x = 100000.0
    game.update_camera()
    assert game.camera_x == game.map_cols * BLOCK_SIZE - SCREEN_WIDTH


def test_enemy_turns_at_bounds():
    enemy = Enemy(x=599.0)
    enemy.update()
    assert enemy.x == 600.0
    assert enemy.direction == -1


def test_menu_clicks(tmp_path):
    exits = []
    game = CampaignGame(assets=tmp_path, on_exit=lambda: exits.append(True))
    game.state = GameState.MAIN_MENU
    start = campaign.MAIN_MENU_BUTTONS[0]
    game.click(start.x + 5, SCREEN_HEIGHT - (start.y + 5))
    assert game.state is GameState.LEVEL_SELECTOR
    game.state = GameState.MAIN_MENU
    exit_button = campaign.MAIN_MENU_BUTTONS[3]
    game.click(exit_button.x + 5, SCREEN_HEIGHT - (exit_button.y + 5))
    assert exits == [True]


def test_level_selector_click_starts_first_level(game, tmp_path):
    write_map(tmp_path / "maps" / "level1.txt", ["@*"])
    game.state = GameState.LEVEL_SELECTOR
    second = level_buttons()[1]
    game.click(second.x + 5, SCREEN_HEIGHT - (second.y + 5))
    assert game.state is GameState.GAME
    assert game.current_level == 1
    assert game.total_items == 1


def test_back_buttons(game):
    game.state = GameState.INSTRUCTIONS
    back = campaign.MENU_BACK_BUTTON
    game.click(back.x + 5, SCREEN_HEIGHT - (back.y + 5))
    assert game.state is GameState.MAIN_MENU
    game.state = GameState.LEVEL_SELECTOR
    back = campaign.SELECTOR_BACK_BUTTON
    game.click(back.x + 5, SCREEN_HEIGHT - (back.y + 5))
    assert game.state is GameState.MAIN_MENU


def test_draw_main_menu(game):
    canvas = Canvas(SCREEN_WIDTH, SCREEN_HEIGHT)
    game.state = GameState.MAIN_MENU
    game.draw(canvas)
    assert canvas.pixel_color(990, 10) == (0, 0, 100)
    assert canvas.pixel_color(102, 252) == (0, 100, 200)


def test_draw_game_uses_fallback_block(game, tmp_path):
    lines = ["......"] * 11 + [".....#"]
    playing(game, tmp_path, lines)
    canvas = Canvas(SCREEN_WIDTH, SCREEN_HEIGHT)
    game.draw(canvas)
    assert canvas.pixel_color(260, 10) == (100, 100, 100)
    assert canvas.pixel_color(900, 300) == (0, 0, 200)