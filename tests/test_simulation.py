import logging

from jezzball import CellState, GameConfig, GameStatus, Simulation, Wall


def test_ball_reverses_at_right_edge():
    sim = Simulation(GameConfig(initial_balls=((100, 100, 1, 1),)))
    ball = sim.balls[0]

    while ball.x < 790:
        sim.step()

    assert ball.x == 790
    assert ball.dx == -2

    sim.step()
    assert ball.x == 788


def test_balls_stay_inside_arena(config):
    sim = Simulation(GameConfig(
        ball_speed=3,
        initial_balls=config.initial_balls + ((101, 57, 1, -1),),
    ))
    r = config.ball_radius

    for _ in range(2000):
        sim.step()
        for ball in sim.balls:
            assert r <= ball.x <= config.width - r
            assert r <= ball.y <= config.height - r


def test_rays_grow_until_edge_then_become_walls(still_sim):
    sim = still_sim((50, 50))
    sim.spawn_divider(400, 300)
    h, v = sim.divider.horizontal, sim.divider.vertical
    assert (h.x1, h.y1, h.x2, h.y2) == (400, 300, 400, 300)

    for n in range(1, 61):
        sim.step()
        assert h.x2 == 400 + 5 * n
        assert v.y2 == 300 + 5 * n

    # The vertical ray sits at the edge for one tick, then turns into a wall
    assert sim.divider.vertical is v
    assert sim.walls == []
    sim.step()
    assert sim.divider.vertical is None
    assert sim.walls == [Wall(400, 300, 1, 300)]

    for _ in range(19):
        sim.step()
    assert h.x2 == 800
    assert sim.divider.horizontal is h

    sim.step()
    assert sim.divider is None
    assert sim.walls[-1] == Wall(400, 300, 400, 1)


def test_ray_endpoint_never_passes_edge(still_sim):
    sim = still_sim((50, 50), line_step=7, materialize_walls=False)
    sim.spawn_divider(401, 303)
    h, v = sim.divider.horizontal, sim.divider.vertical

    for _ in range(200):
        sim.step()
        assert h.x2 <= 800
        assert v.y2 <= 600

    assert (h.x2, v.y2) == (800, 600)


def test_unmaterialized_rays_stay_inert_at_edge(still_sim):
    sim = still_sim((50, 50), materialize_walls=False)
    sim.spawn_divider(400, 300)

    for _ in range(300):
        sim.step()

    assert sim.walls == []
    assert sim.divider.horizontal.x2 == 800
    assert sim.divider.vertical.y2 == 600


def test_ray_pops_when_ball_box_touches_it(still_sim):
    sim = still_sim((330, 300))
    sim.spawn_divider(300, 300)

    for _ in range(4):
        sim.step()
    # Bounds cover x in [300, 320); the ball box starts at 320
    assert sim.divider.horizontal.x2 == 320

    sim.step()
    assert sim.divider.horizontal is None
    assert sim.divider.vertical is not None
    assert sim.walls == []


def test_ball_on_ray_stalls_growth_then_pops_it(still_sim):
    sim = still_sim((330, 300))
    sim.spawn_divider(300, 300)
    ray = sim.divider.horizontal
    ray.x2 = 350

    sim.grow_rays()
    assert ray.stalled
    assert ray.x2 == 350

    sim.move_balls()
    assert sim.divider.horizontal is None


def test_stall_and_pop_happen_in_one_tick(still_sim):
    sim = still_sim((330, 300))
    sim.spawn_divider(300, 300)
    sim.divider.horizontal.x2 = 350

    sim.step()
    assert sim.divider.horizontal is None
    assert sim.divider.vertical.y2 == 305


def test_stalled_ray_does_not_grow(still_sim):
    sim = still_sim((50, 50))
    sim.spawn_divider(400, 300)
    sim.divider.horizontal.stalled = True

    sim.step()
    assert sim.divider.horizontal.x2 == 400
    assert sim.divider.vertical.y2 == 305


def test_wall_bounce_reverses_both_axes():
    sim = Simulation(GameConfig(initial_balls=((400, 288, 1, 1),)))
    sim.walls.append(Wall(0, 300, 800, 1))
    ball = sim.balls[0]

    sim.step()
    assert (ball.x, ball.y, ball.dx, ball.dy) == (402, 290, 2, 2)

    sim.step()
    assert (ball.x, ball.y, ball.dx, ball.dy) == (404, 292, -2, -2)

    sim.step()
    assert (ball.x, ball.y, ball.dx, ball.dy) == (402, 290, -2, -2)


def test_touching_two_walls_bounces_once():
    sim = Simulation(GameConfig(initial_balls=((401, 301, 1, 1),)))
    sim.walls.extend([Wall(400, 300, 400, 1), Wall(400, 300, 1, 300)])
    ball = sim.balls[0]

    sim.step()
    assert (ball.dx, ball.dy) == (-2, -2)


def test_new_press_replaces_growing_divider(still_sim):
    sim = still_sim((50, 50))
    old = sim.spawn_divider(400, 300)
    for _ in range(10):
        sim.step()

    new = sim.spawn_divider(100, 500)
    assert sim.divider is new
    assert new is not old
    assert (new.horizontal.x1, new.horizontal.y1) == (100, 500)
    assert new.horizontal.x2 == 100
    assert sim.walls == []


def test_snap_to_grid_moves_origin_to_section_lines(still_sim):
    sim = still_sim((50, 50), snap_to_grid=True)
    divider = sim.spawn_divider(437, 262)
    assert (divider.x, divider.y) == (400, 300)


def test_zero_length_ray_at_edge_leaves_no_wall(still_sim):
    sim = still_sim((50, 50), snap_to_grid=True)
    sim.spawn_divider(790, 300)

    sim.step()
    assert sim.divider.horizontal is None
    assert sim.walls == []


def test_enclosed_region_fills_and_clears_level(still_sim):
    sim = still_sim((50, 50), win_fraction=0.25)
    sim.spawn_divider(400, 300)

    for _ in range(81):
        sim.step()

    assert len(sim.walls) == 2
    assert sim.grid.filled_count() == 12
    assert sim.status is GameStatus.CLEARED

    # Cleared levels stop ticking and ignore clicks
    ticks = sim.ticks
    sim.step()
    assert sim.ticks == ticks
    assert sim.spawn_divider(100, 100) is None


def test_full_width_wall_fills_other_half(still_sim):
    sim = still_sim((50, 50))
    sim.spawn_divider(0, 300)

    for _ in range(161):
        sim.step()

    assert Wall(0, 300, 800, 1) in sim.walls
    assert sim.grid.filled_fraction() == 0.5
    assert sim.status is GameStatus.PLAYING


def test_reset_restores_starting_level():
    sim = Simulation(GameConfig(initial_balls=((50, 50, 0, 0),), win_fraction=0.25))
    sim.spawn_divider(400, 300)
    for _ in range(81):
        sim.step()
    assert sim.status is GameStatus.CLEARED

    sim.reset()
    assert sim.walls == []
    assert sim.divider is None
    assert sim.grid.filled_count() == 0
    assert sim.status is GameStatus.PLAYING
    assert [(b.x, b.y) for b in sim.balls] == [(50, 50)]
    assert sim.ticks == 0


def test_wall_creation_is_logged(still_sim, caplog):
    sim = still_sim((50, 50))
    sim.spawn_divider(400, 300)

    with caplog.at_level(logging.INFO, logger="jezzball"):
        for _ in range(81):
            sim.step()

    messages = [record.getMessage() for record in caplog.records]
    assert "Wall created at (400, 300) size 1x300" in messages
    assert any(m.startswith("Filled 12 sections") for m in messages)


def test_ball_speed_scales_initial_velocities():
    default = Simulation(GameConfig())
    assert [(b.dx, b.dy) for b in default.balls] == [(2, 2), (-2, 2)]

    fast = Simulation(GameConfig(ball_speed=5))
    assert [(b.dx, b.dy) for b in fast.balls] == [(5, 5), (-5, 5)]
    assert [(b.x, b.y) for b in fast.balls] == [(100, 100), (200, 150)]


def test_off_grid_divider_leaves_ball_section_empty(still_sim):
    sim = still_sim((50, 50), (480, 395))
    sim.spawn_divider(420, 375)

    for _ in range(200):
        sim.step()

    assert Wall(420, 375, 380, 1) in sim.walls
    assert Wall(420, 375, 1, 225) in sim.walls
    assert sim.grid.filled_count() == 0

    # The ball roams its sealed box and never meets a filled section
    ball = sim.balls[1]
    ball.dy = 2
    for _ in range(30):
        sim.step()
        assert sim.grid[sim.grid.cell_at(ball.x, ball.y)] is CellState.EMPTY
    assert (ball.x, ball.y) == (480, 455)


def test_off_grid_divider_fills_only_sealed_sections(still_sim):
    sim = still_sim((50, 50))
    sim.spawn_divider(420, 375)

    for _ in range(200):
        sim.step()

    filled = {
        (row, col)
        for row in range(sim.grid.rows)
        for col in range(sim.grid.cols)
        if sim.grid.cells[row][col] is CellState.FILLED
    }
    assert filled == {(4, 5), (4, 6), (4, 7), (5, 5), (5, 6), (5, 7)}
