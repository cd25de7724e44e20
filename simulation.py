# simulation.py
"""
Handles the core simulation logic and physics calculations.

This module defines the Simulation class, which is responsible for
advancing the node collection by one tick. Every node is pulled towards
each neighbour within the interaction radius, its velocity and position
are integrated, and nodes that drift too far off the canvas are recycled.
"""
import logging
import math
import numpy as np
from typing import Dict, Any
from particle import ParticleSystem
from constants import MAX_CONNECTOR_LENGTH, GRAVITY_FACTOR
from numba import jit

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, particles: ParticleSystem, params: Dict[str, Any],
#              width: int, height: int):
#     - Inputs:
#       - particles: An initialized ParticleSystem object.
#       - params: Dictionary of simulation parameters from config.json.
#         - "max_connector_length": float
#         - "gravity_factor": float
#       - width, height: dimensions of the canvas.
#     - Outputs: None
#     - Side Effects: Stores references to particles and parameters.
#
#   - step(self) -> int:
#     - Inputs: None (operates on internal state).
#     - Outputs: number of nodes recycled during this step.
#     - Side Effects: Modifies positions and velocities of the internal
#       ParticleSystem in place, node by node, and resets every node that
#       ended the step outside the extended canvas bounds.
#     - Invariants: Node count remains constant. Velocity is never damped
#       or clamped: v' = v + sum of pulls.

@jit(nopython=True)
def _pull_strength_numba(distance, max_connector_length):
    """Linear falloff: 1 for coincident nodes, 0 at the interaction radius."""
    return 1.0 - distance / max_connector_length

@jit(nopython=True)
def _pair_pull_numba(diff_x, diff_y, size_ratio, max_connector_length, gravity_factor):
    """
    Numba-jitted velocity change applied to a node by a single neighbour.

    `diff` points from the neighbour to the node, so the returned vector
    points back towards the neighbour. Coincident nodes (including a node
    and itself) and nodes at or beyond the radius contribute nothing.
    """
    distance = math.hypot(diff_x, diff_y)
    # The comparison is False for NaN, which also contributes nothing.
    if distance > 0.0 and distance < max_connector_length:
        pull = _pull_strength_numba(distance, max_connector_length) * gravity_factor * size_ratio
        return -diff_x * pull, -diff_y * pull
    return 0.0, 0.0

@jit(nopython=True)
def _is_out_of_bounds_numba(x, y, size, width, height, max_connector_length):
    """True once a node is further than size + radius beyond any edge."""
    margin = size + max_connector_length
    return (
        y < -margin
        or x > width + margin
        or y > height + margin
        or x < -margin
    )

@jit(nopython=True)
def _advance_node_numba(
    i, positions, velocities, sizes,
    max_connector_length, gravity_factor, world_width, world_height
):
    """
    Numba-jitted update of a single node.

    The node scans every other node (brute force, no spatial grid) and
    accumulates their pull on top of its own velocity. Positions of nodes
    already advanced this step are used as they are, so the result depends
    on collection order.

    Returns True if the node must be recycled.
    """
    x = positions[i, 0]
    y = positions[i, 1]
    size = sizes[i]
    offset_x = velocities[i, 0]
    offset_y = velocities[i, 1]

    for j in range(positions.shape[0]):
        pull_x, pull_y = _pair_pull_numba(
            x - positions[j, 0], y - positions[j, 1], sizes[j] / size,
            max_connector_length, gravity_factor
        )
        offset_x += pull_x
        offset_y += pull_y

    velocities[i, 0] = offset_x
    velocities[i, 1] = offset_y
    positions[i, 0] = x + offset_x
    positions[i, 1] = y + offset_y

    return _is_out_of_bounds_numba(
        positions[i, 0], positions[i, 1], size,
        world_width, world_height, max_connector_length
    )

def pull_strength(distance: float, max_connector_length: float = MAX_CONNECTOR_LENGTH) -> float:
    """Strength of the pull between two nodes `distance` apart, before scaling."""
    return _pull_strength_numba(float(distance), float(max_connector_length))

class Simulation:
    """
    Manages the per-frame update of the node collection.
    """
    def __init__(self, particles: ParticleSystem, params: Dict[str, Any], width: int, height: int):
        """
        Initializes the simulation environment.

        Args:
            particles (ParticleSystem): The node collection to simulate.
            params (Dict[str, Any]): Simulation parameters from config.
            width (int): The width of the canvas.
            height (int): The height of the canvas.
        """
        self.particles = particles
        self.max_connector_length = float(params.get('max_connector_length', MAX_CONNECTOR_LENGTH))
        self.gravity_factor = float(params.get('gravity_factor', GRAVITY_FACTOR))

        # The canvas size is fixed for the whole run.
        self.world_width = float(width)
        self.world_height = float(height)

        self.step_count = 0
        self.recycled_total = 0

        if self.max_connector_length <= 0:
            msg = (
                f"Configuration error: max_connector_length "
                f"({self.max_connector_length}) must be positive."
            )
            logging.critical(msg)
            raise ValueError(msg)

        logging.info("Simulation logic initialized and configuration validated.")
        logging.info(
            f"Brute-force gravity enabled: interaction radius "
            f"{self.max_connector_length:.1f}px, gravity factor {self.gravity_factor:g}."
        )

    def step(self) -> int:
        """
        Executes one tick of the simulation.

        Returns:
            int: The number of nodes recycled during this tick.
        """
        particles = self.particles
        recycled = 0

        for i in range(particles.count):
            # 1. Pull, integrate and test the bounds (using Numba)
            out_of_bounds = _advance_node_numba(
                i, particles.positions, particles.velocities, particles.sizes,
                self.max_connector_length, self.gravity_factor,
                self.world_width, self.world_height
            )

            # 2. Recycle the slot in place. Later nodes in this same pass
            #    already interact with the replacement.
            if out_of_bounds:
                particles.reset_node(i)
                recycled += 1

        self.step_count += 1
        self.recycled_total += recycled
        return recycled

    def mean_speed(self) -> float:
        """Average node speed, used for throttled debug logging."""
        if self.particles.count == 0:
            return 0.0
        return float(np.mean(np.linalg.norm(self.particles.velocities, axis=1)))
