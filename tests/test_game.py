import logging
import random

import pytest

from algorithms.builders import create_empty_maze, create_simple_maze
from config import Settings
from game import Maze, SessionManager
from maze import (
    N, E, S, W,
    BlockedByWall,
    InvalidDirection,
    MazeSolved,
    NoActiveMaze,
    PlacementError,
    Victory,
)


def make_maze(grid, start=(0, 0), treasure=(4, 4)):
    m = Maze(grid, builder="test")
    m.set_start_point(*start)
    m.set_treasure(*treasure)
    return m


def install(manager, m):
    manager.current = m
    manager.current_builder = 0


def test_placement_rules():
    m = Maze(create_empty_maze(3, 3))
    m.set_start_point(1, 1)
    with pytest.raises(PlacementError):
        m.set_treasure(1, 1)
    m.set_treasure(2, 2)
    with pytest.raises(PlacementError):
        m.set_start_point(2, 2)
    assert m.icarus == (1, 1)
    assert m.get_room(1, 1).start and m.get_room(2, 2).treasure


@pytest.mark.parametrize("w,h", [(1, 2), (2, 1), (2, 2), (5, 5)])
def test_place_objects_never_overlap(w, h):
    rnd = random.Random(12)
    for _ in range(200):
        m = Maze(create_empty_maze(w, h))
        m.place_objects(rnd)
        assert m.start != m.end
        assert m.icarus == m.start
        starts = sum(r.start for row in m.grid.rooms for r in row)
        treasures = sum(r.treasure for row in m.grid.rooms for r in row)
        assert starts == 1 and treasures == 1


def test_move_into_wall_changes_nothing():
    m = make_maze(create_empty_maze(5, 5))
    for d in (N, W):
        with pytest.raises(BlockedByWall):
            m.move(d)
    assert m.icarus == (0, 0)
    assert m.steps_taken == 0


def test_move_updates_position_steps_and_visited():
    m = make_maze(create_empty_maze(5, 5))
    m.move(E)
    m.move(S)
    assert m.icarus == (1, 1)
    assert m.steps_taken == 2
    assert m.get_room(1, 0).visited and m.get_room(1, 1).visited
    assert not m.get_room(2, 2).visited


def test_look_around_signals_victory_on_treasure():
    m = make_maze(create_empty_maze(2, 1), start=(0, 0), treasure=(1, 0))
    assert m.look_around().left
    m.move(E)
    with pytest.raises(Victory) as exc:
        m.look_around()
    assert exc.value.steps == 1


def test_manager_rejects_moves_without_a_maze():
    manager = SessionManager(Settings(width=3, height=3))
    with pytest.raises(NoActiveMaze):
        manager.move("left")
    with pytest.raises(InvalidDirection):
        manager.move("north-ish")


def test_manager_awake_builds_in_round_robin_order():
    manager = SessionManager(Settings(width=4, height=4, times=1), rnd=random.Random(2))
    names = []
    for _ in range(5):
        reply = manager.awake()
        assert not reply.error and not reply.victory
        names.append(manager.current.builder)
        assert manager.current.start != manager.current.end
    assert names == ["empty", "simple", "ring", "btree", "tree"]


def test_manager_victory_records_score_once():
    manager = SessionManager(Settings(width=5, height=5, times=1))
    install(manager, make_maze(create_empty_maze(5, 5), treasure=(2, 0)))

    r = manager.move("right")
    assert not r.victory and r.steps == 1
    r = manager.move("right")
    assert r.victory
    assert r.steps == 2
    assert "2 steps" in r.message
    assert manager.scores == [2]
    assert manager.selector.scorecard[0] == 2

    with pytest.raises(MazeSolved):
        manager.move("left")
    assert manager.scores == [2]


def test_manager_blocked_move_keeps_step_count():
    manager = SessionManager(Settings(width=4, height=3, times=1))
    install(manager, make_maze(create_simple_maze(4, 3), treasure=(0, 2)))
    with pytest.raises(BlockedByWall):
        manager.move("down")
    assert manager.current.steps_taken == 0
    assert manager.current.icarus == (0, 0)


def test_abandoned_maze_scores_nothing(caplog):
    manager = SessionManager(Settings(width=3, height=3, times=1), rnd=random.Random(8))
    manager.awake()
    with caplog.at_level(logging.WARNING, logger="labyrinth.game"):
        manager.awake()
    assert "Abandoning" in caplog.text
    assert manager.scores == []
    assert sum(manager.selector.scorecard) == 0


def test_flush_reports_once(caplog):
    manager = SessionManager(Settings(width=3, height=3, times=1))
    manager.scores = [4, 6]
    with caplog.at_level(logging.INFO, logger="labyrinth.game"):
        first = manager.flush()
        second = manager.flush()
    assert first["sessions"] == 2 and first["average"] == 5
    assert second == first
    assert caplog.text.count("Labyrinth solved 2 times with an avg of 5 steps") == 1


def test_manager_validates_settings():
    with pytest.raises(ValueError):
        SessionManager(Settings(width=1, height=1))


def test_moving_the_start_clears_the_old_room():
    m = Maze(create_empty_maze(3, 3))
    m.set_start_point(0, 0)
    m.set_start_point(2, 1)
    old = m.get_room(0, 0)
    assert not old.start and not old.visited
    assert m.get_room(2, 1).start and m.get_room(2, 1).visited
    assert "⚑" not in m.render(pretty=True).splitlines()[1]
