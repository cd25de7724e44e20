# main.py
"""
Main entry point for the Gravity Nodes animation.

This script orchestrates the entire animation lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Sets up the window, the node collection and the simulation.
4. Runs the frame loop: input, spawns, physics update, drawing.
5. Handles clean shutdown.
"""
import logging
from utils import setup_logging, load_config
import cProfile
import pstats
import io
from typing import Dict, Any

from constants import LOG_THROTTLE_STEPS, MAX_CONNECTOR_LENGTH
from particle import ParticleSystem
from simulation import Simulation
from visualization import PointerState, Visualizer


def run_loop(particles: ParticleSystem, sim: Simulation, visualizer, pointer: PointerState,
             run_params: Dict[str, Any]) -> int:
    """
    Runs frames until the user quits or `max_steps` is reached.

    Each frame consumes the input gathered since the previous one, applies
    the queued spawns, advances the simulation and draws the result.

    Returns:
        int: The number of frames executed.
    """
    log_throttle = run_params.get('log_throttle_steps', LOG_THROTTLE_STEPS)
    max_steps = run_params.get('max_steps')  # None runs until quit

    step_num = 0
    while True:
        if not visualizer.process_events(pointer):
            break

        for x, y in pointer.drain_spawns():
            index = particles.add_node(x=x, y=y)
            logging.info(f"Spawned node {index} at ({x:.0f}, {y:.0f}). Total nodes: {particles.count}.")

        sim.step()
        visualizer.draw(particles)
        step_num += 1

        # Hot loops must throttle logs
        if step_num % log_throttle == 0:
            logging.info(f"Simulation step {step_num}")
            logging.debug(
                f"Step {step_num} | Nodes: {particles.count} | "
                f"Average Speed: {sim.mean_speed():.4f} | "
                f"Recycled so far: {sim.recycled_total}"
            )

        if max_steps is not None and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping simulation.")
            break

    return step_num


def main(config_path: str = 'config.json'):
    """
    The main function to run the animation.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Gravity Nodes Starting ---")

    sim_params = config['simulation_parameters']
    run_params = config['run_control']
    vis_params = config['visualization']

    # --- Component Initialization ---
    # 1. The visualizer opens the window and so determines the canvas size.
    visualizer = Visualizer(
        vis_params,
        max_connector_length=sim_params.get('max_connector_length', MAX_CONNECTOR_LENGTH)
    )
    width = visualizer.sim_width
    height = visualizer.sim_height

    # 2. Build the node collection and the simulation on that canvas.
    try:
        particles = ParticleSystem(sim_params, width, height)
        sim = Simulation(particles, sim_params, width, height)
    except ValueError:
        visualizer.close()
        raise
    pointer = PointerState()

    profiler = cProfile.Profile()
    profiler.enable()
    steps = run_loop(particles, sim, visualizer, pointer, run_params)
    profiler.disable()

    visualizer.close()
    logging.info(f"Simulation loop finished after {steps} steps with {particles.count} nodes.")

    # --- Performance Profile Output ---
    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    # Sort by cumulative time spent in the function
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")

    logging.info("--- Gravity Nodes Shutting Down ---")


if __name__ == "__main__":
    main()
