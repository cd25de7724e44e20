"""Tests for the frame loop and the entry point."""

from main import main, run_loop
from simulation import Simulation
from visualization import PointerState


class FakeVisualizer:
    """Stands in for the pygame window, scripting pointer input per frame."""

    def __init__(self, clicks=None, quit_after=None):
        self.clicks = clicks or {}
        self.quit_after = quit_after
        self.frames_drawn = 0
        self.counts_drawn = []

    def process_events(self, pointer):
        if self.quit_after is not None and self.frames_drawn >= self.quit_after:
            return False
        for pos in self.clicks.get(self.frames_drawn, []):
            pointer.move_to(pos)
            pointer.request_spawn()
        return True

    def draw(self, particles):
        self.frames_drawn += 1
        self.counts_drawn.append(particles.count)


def test_runs_until_max_steps(make_system, sim_params):
    system = make_system(initial_node_count=3)
    sim = Simulation(system, sim_params, 650, 400)
    vis = FakeVisualizer()

    steps = run_loop(system, sim, vis, PointerState(), {"max_steps": 5, "log_throttle_steps": 2})

    assert steps == 5
    assert vis.frames_drawn == 5
    assert sim.step_count == 5


def test_stops_on_quit(make_system, sim_params):
    system = make_system()
    sim = Simulation(system, sim_params, 650, 400)
    vis = FakeVisualizer(quit_after=2)

    steps = run_loop(system, sim, vis, PointerState(), {"max_steps": None})

    assert steps == 2
    assert sim.step_count == 2


def test_clicks_spawn_before_update(make_system, sim_params):
    system = make_system(initial_node_count=1)
    sim = Simulation(system, sim_params, 650, 400)
    vis = FakeVisualizer(clicks={1: [(40, 60)], 2: [(10, 10), (20, 20)]})

    run_loop(system, sim, vis, PointerState(), {"max_steps": 4})

    assert vis.counts_drawn == [1, 2, 4, 4]
    # The spawned node has only drifted for three steps since the click.
    spawn_x, spawn_y = system.positions[1]
    assert abs(spawn_x - 40) < 1
    assert abs(spawn_y - 60) < 1


def test_missing_config(tmp_path, capsys):
    assert main(str(tmp_path / "missing.json")) is None
    assert "FATAL" in capsys.readouterr().out
