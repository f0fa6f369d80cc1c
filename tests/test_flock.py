import copy
from concurrent.futures import Future

import numpy as np
import pytest
from numpy.testing import assert_allclose

from shoal import Fish, Flock, SimulationParameters, TankBounds, ThreadedVisualLayer, VisualLayer
from conftest import FixedRng


class ManualVisualLayer(VisualLayer):
    """Spawns stay pending until the test resolves them."""

    def __init__(self):
        self.futures = []
        self.despawned = []

    def spawn_visual(self, position):
        future = Future()
        self.futures.append(future)
        return future

    def despawn_visual(self, handle):
        self.despawned.append(handle)


def test_initial_population_from_params(visuals):
    flock = Flock(params=SimulationParameters(target_population=6), visuals=visuals, seed=1)
    assert flock.num_fish == 6
    assert visuals.spawned == 6


def test_spawn_positions_inside_spawn_region(empty_flock):
    positions = empty_flock.generate_spawn_positions(200)
    bounds = empty_flock.bounds

    assert positions.shape == (200, 3)
    assert np.all(np.abs(positions[:, [0, 2]]) <= 30.0)
    assert np.all(positions[:, 1] >= bounds.limit_y_min)
    assert np.all(positions[:, 1] <= bounds.limit_y_max)


def test_resize_is_idempotent(empty_flock, visuals):
    empty_flock.resize_to(4)
    empty_flock.resize_to(4)

    assert empty_flock.num_fish == 4
    assert visuals.spawned == 4
    assert visuals.despawned == []


def test_shrink_removes_most_recent(empty_flock, visuals):
    empty_flock.resize_to(5)
    first_three = [fish.handle for fish in empty_flock.fish[:3]]
    last_two = [fish.handle for fish in empty_flock.fish[3:]]

    empty_flock.resize_to(3)

    assert [fish.handle for fish in empty_flock.fish] == first_three
    assert sorted(visuals.despawned) == sorted(last_two)
    assert visuals.live == set(first_three)


def test_negative_target_clamps_to_zero(empty_flock, visuals):
    empty_flock.resize_to(3)
    empty_flock.resize_to(-4)

    assert empty_flock.num_fish == 0
    assert empty_flock.target == 0
    assert len(visuals.despawned) == 3


def test_resize_population_alias(empty_flock):
    empty_flock.resize_population(2)
    assert empty_flock.num_fish == 2


def test_tick_applies_target_population_change(empty_flock):
    params = SimulationParameters(target_population=0)
    empty_flock.tick(0.01, params)
    assert empty_flock.num_fish == 0

    params.target_population = 7
    empty_flock.tick(0.01, params)
    assert empty_flock.num_fish == 7

    params.target_population = 2
    empty_flock.tick(0.01, params)
    assert empty_flock.num_fish == 2


def test_tick_does_not_undo_direct_resize(empty_flock):
    empty_flock.resize_to(5)
    empty_flock.tick(0.01)
    assert empty_flock.num_fish == 5


def test_tick_rejects_negative_dt(empty_flock):
    with pytest.raises(ValueError):
        empty_flock.tick(-0.1)


def test_tick_advances_time(empty_flock):
    empty_flock.resize_to(3)
    for _ in range(4):
        empty_flock.tick(0.25)
    assert empty_flock.time == pytest.approx(1.0)
    assert empty_flock.frame == 4


def test_invariants_hold_over_many_ticks():
    params = SimulationParameters(target_population=25)
    flock = Flock(params=params, seed=42)
    bounds = flock.bounds

    for _ in range(300):
        flock.tick(1.0 / 60.0)
        speeds = np.linalg.norm(flock.velocities, axis=1)
        assert np.all(speeds >= params.min_speed - 1e-9)
        assert np.all(speeds <= params.max_speed + 1e-9)
        for position in flock.positions:
            assert bounds.contains(position)


def test_same_seed_is_deterministic():
    runs = []
    for _ in range(2):
        flock = Flock(params=SimulationParameters(target_population=10), seed=5)
        for _ in range(50):
            flock.tick(1.0 / 60.0)
        runs.append(flock.positions)

    assert_allclose(runs[0], runs[1])


def test_update_order_does_not_change_result():
    params = SimulationParameters(target_population=0)
    a = Fish(position=np.array([0.0, 17.5, 0.0]), velocity=np.array([2.0, 0.0, 0.0]))
    b = Fish(position=np.array([3.0, 17.5, 1.0]), velocity=np.array([0.0, 0.0, 3.0]))

    forward = Flock(params=params, seed=1)
    forward.fish = [copy.deepcopy(a), copy.deepcopy(b)]
    forward.rng = FixedRng()

    backward = Flock(params=params, seed=1)
    backward.fish = [copy.deepcopy(b), copy.deepcopy(a)]
    backward.rng = FixedRng()

    for _ in range(10):
        forward.tick(0.1, params)
        backward.tick(0.1, params)

    assert_allclose(forward.fish[0].position, backward.fish[1].position)
    assert_allclose(forward.fish[1].position, backward.fish[0].position)
    assert_allclose(forward.fish[0].velocity, backward.fish[1].velocity)


def test_pending_spawns_join_at_tick_boundary():
    layer = ManualVisualLayer()
    flock = Flock(params=SimulationParameters(target_population=0), visuals=layer, seed=2)

    flock.resize_to(3)
    assert flock.num_fish == 0
    assert flock.num_pending == 3
    assert flock.logical_count == 3

    flock.tick(0.1)
    assert flock.num_fish == 0

    layer.futures[1].set_result("second")
    assert flock.num_fish == 0
    flock.tick(0.1)
    assert [fish.handle for fish in flock.fish] == ["second"]

    layer.futures[0].set_result("first")
    layer.futures[2].set_result("third")
    flock.tick(0.1)
    assert [fish.handle for fish in flock.fish] == ["second", "first", "third"]
    assert flock.num_pending == 0


def test_resize_while_pending_does_not_double_spawn():
    layer = ManualVisualLayer()
    flock = Flock(params=SimulationParameters(target_population=0), visuals=layer, seed=2)

    flock.resize_to(4)
    flock.resize_to(4)

    assert len(layer.futures) == 4


def test_shrink_discards_pending_spawns_first():
    layer = ManualVisualLayer()
    flock = Flock(params=SimulationParameters(target_population=0), visuals=layer, seed=2)

    flock.resize_to(2)
    layer.futures[0].set_result("a")
    layer.futures[1].set_result("b")
    flock.tick(0.1)

    flock.resize_to(4)
    flock.resize_to(3)
    assert flock.logical_count == 3
    assert flock.num_pending == 1

    # The discarded spawn is released as soon as it resolves
    layer.futures[3].set_result("d")
    layer.futures[2].set_result("c")
    flock.tick(0.1)

    assert [fish.handle for fish in flock.fish] == ["a", "b", "c"]
    assert layer.despawned == ["d"]


def test_failed_spawn_is_not_counted(capsys):
    layer = ManualVisualLayer()
    flock = Flock(params=SimulationParameters(target_population=0), visuals=layer, seed=2)

    flock.resize_to(2)
    layer.futures[0].set_exception(IOError("model not found"))
    layer.futures[1].set_result("ok")
    flock.tick(0.1)

    assert flock.num_fish == 1
    assert flock.num_pending == 0
    assert len(flock.failed_spawns) == 1
    assert "Spawn failed" in capsys.readouterr().out


def test_threaded_visual_layer_spawns_and_releases():
    released = []
    layer = ThreadedVisualLayer(loader=lambda position: tuple(position), unloader=released.append)
    flock = Flock(params=SimulationParameters(target_population=3), visuals=layer, seed=9)

    for spawn in list(flock.pending):
        spawn.future.result(timeout=5)
    flock.tick(0.01)

    assert flock.num_fish == 3
    flock.close()
    assert len(released) == 3
    assert flock.num_fish == 0


def test_render_states_and_stats(empty_flock):
    empty_flock.resize_to(2)
    empty_flock.tick(0.1)

    states = empty_flock.render_states()
    assert [handle for handle, _, _ in states] == [fish.handle for fish in empty_flock.fish]
    handle, position, rotation = states[0]
    assert position.shape == (3,)
    assert len(rotation) == 2

    stats = empty_flock.stats()
    assert stats["fish"] == 2
    assert stats["target"] == 2
    assert stats["average_speed"] >= empty_flock.params.min_speed - 1e-9

    info = empty_flock.debug_info()
    assert "Fish: 2/2" in info
    assert "Separation: 8.0u" in info


def test_empty_flock_reports_zero_speed(empty_flock):
    assert empty_flock.average_speed() == 0.0
    assert empty_flock.positions.shape == (0, 3)
    empty_flock.tick(0.1)
