"""Unit tests for the gravity update step."""

import math

import numpy as np
import pytest

from simulation import (
    Simulation, pull_strength, _pair_pull_numba, _is_out_of_bounds_numba
)


class TestPullStrength:
    """Tests for the linear distance falloff."""

    def test_half_radius(self):
        assert pull_strength(150, 300) == 0.5

    def test_zero_at_radius(self):
        assert pull_strength(300, 300) == 0.0

    def test_approaches_one(self):
        assert pull_strength(1e-9, 300) == pytest.approx(1.0)

    def test_monotonically_decreasing(self):
        distances = np.linspace(0.01, 300, 200)
        strengths = np.array([pull_strength(d) for d in distances])
        assert np.all(np.diff(strengths) < 0)


class TestPairPull:
    """Tests for the pull of a single neighbour."""

    def test_coincident_nodes_do_not_interact(self):
        assert _pair_pull_numba(0.0, 0.0, 2.0, 300.0, 1e-5) == (0.0, 0.0)

    def test_no_pull_at_radius(self):
        assert _pair_pull_numba(300.0, 0.0, 1.0, 300.0, 1e-5) == (0.0, 0.0)

    def test_no_pull_beyond_radius(self):
        assert _pair_pull_numba(200.0, 250.0, 1.0, 300.0, 1e-5) == (0.0, 0.0)

    def test_nan_distance_does_not_interact(self):
        assert _pair_pull_numba(math.nan, 0.0, 1.0, 300.0, 1e-5) == (0.0, 0.0)

    def test_pull_points_towards_neighbour(self):
        # Node to the right of its neighbour is pulled left.
        pull_x, pull_y = _pair_pull_numba(150.0, 0.0, 1.0, 300.0, 1e-5)
        assert pull_x == pytest.approx(-150.0 * 0.5 * 1e-5)
        assert pull_y == 0.0

    def test_larger_neighbour_pulls_harder(self):
        small, _ = _pair_pull_numba(-100.0, 0.0, 0.5, 300.0, 1e-5)
        large, _ = _pair_pull_numba(-100.0, 0.0, 2.0, 300.0, 1e-5)
        assert large == pytest.approx(4 * small)
        assert large > 0


class TestBounds:
    """Tests for the out-of-bounds rule."""

    @pytest.mark.parametrize("x, y", [
        (-311.0, 200.0),
        (650.0 + 311.0, 200.0),
        (300.0, -311.0),
        (300.0, 400.0 + 311.0),
    ])
    def test_beyond_margin(self, x, y):
        assert _is_out_of_bounds_numba(x, y, 10.0, 650.0, 400.0, 300.0)

    @pytest.mark.parametrize("x, y", [
        (-310.0, 200.0),
        (650.0 + 310.0, 200.0),
        (300.0, -310.0),
        (325.0, 200.0),
    ])
    def test_within_margin(self, x, y):
        assert not _is_out_of_bounds_numba(x, y, 10.0, 650.0, 400.0, 300.0)


class TestSimulationStep:
    """Tests for Simulation.step()."""

    def test_velocity_accumulates_pull(self, make_system, sim_params):
        system = make_system()
        system.add_node(x=100.0, y=100.0, size=10, vx=0.1, vy=0.0)
        system.add_node(x=250.0, y=100.0, size=20, vx=0.0, vy=0.0)
        sim = Simulation(system, sim_params, 650, 400)

        sim.step()

        # First node: pull = 0.5 * 1e-5 * (20 / 10)
        expected_vx0 = 0.1 + 150.0 * 0.5 * 1e-5 * 2.0
        assert system.velocities[0, 0] == pytest.approx(expected_vx0)
        assert system.velocities[0, 1] == 0.0
        assert system.positions[0, 0] == pytest.approx(100.0 + expected_vx0)

        # Second node sees the first one at its already updated position.
        diff = 250.0 - system.positions[0, 0]
        pull = (1 - diff / 300.0) * 1e-5 * (10 / 20)
        assert system.velocities[1, 0] == pytest.approx(-diff * pull)
        assert system.positions[1, 0] == pytest.approx(250.0 - diff * pull)

    def test_velocity_is_never_damped(self, make_system, sim_params):
        system = make_system()
        system.add_node(x=300.0, y=200.0, vx=0.1, vy=-0.1)
        sim = Simulation(system, sim_params, 650, 400)

        for _ in range(10):
            sim.step()

        np.testing.assert_allclose(system.velocities[0], [0.1, -0.1])
        np.testing.assert_allclose(system.positions[0], [301.0, 199.0])

    def test_distant_nodes_do_not_interact(self, make_system, sim_params):
        system = make_system()
        system.add_node(x=0.0, y=0.0, vx=0.0, vy=0.0)
        system.add_node(x=300.0, y=0.0, vx=0.0, vy=0.0)
        sim = Simulation(system, sim_params, 650, 400)

        sim.step()

        np.testing.assert_array_equal(system.velocities, np.zeros((2, 2)))

    def test_out_of_bounds_node_is_recycled(self, make_system, sim_params):
        system = make_system()
        system.add_node(x=-311.0, y=200.0, size=10, vx=0.0, vy=0.0, color="#000000")
        sim = Simulation(system, sim_params, 650, 400)

        recycled = sim.step()

        node = system.get_node(0)
        assert recycled == 1
        assert sim.recycled_total == 1
        assert system.count == 1
        assert node["color"] == "#ffeedd"
        assert node["size"] in (10, 20)
        margin = node["size"] + 300
        on_edges = [
            node["y"] == -margin,
            node["x"] == -margin,
            node["y"] == 400 + margin,
            node["x"] == 650 + margin,
        ]
        assert sum(on_edges) == 1

    def test_node_moving_out_is_recycled_same_step(self, make_system, sim_params):
        system = make_system()
        system.add_node(x=-310.0, y=200.0, size=10, vx=-0.5, vy=0.0)
        sim = Simulation(system, sim_params, 650, 400)

        assert sim.step() == 1

    def test_node_at_margin_is_kept(self, make_system, sim_params):
        system = make_system()
        system.add_node(x=-310.0, y=200.0, size=10, vx=0.0, vy=0.0)
        sim = Simulation(system, sim_params, 650, 400)

        assert sim.step() == 0
        assert system.positions[0, 0] == -310.0

    def test_collection_never_shrinks(self, make_system, sim_params):
        system = make_system(initial_node_count=12)
        sim = Simulation(system, sim_params, 650, 400)

        for _ in range(50):
            sim.step()

        assert system.count == 12
        assert sim.step_count == 50

    def test_empty_collection(self, make_system, sim_params):
        system = make_system()
        sim = Simulation(system, sim_params, 650, 400)
        assert sim.step() == 0
        assert sim.mean_speed() == 0.0

    def test_invalid_radius(self, make_system, sim_params):
        system = make_system()
        with pytest.raises(ValueError):
            Simulation(system, dict(sim_params, max_connector_length=-1), 650, 400)
