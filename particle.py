# particle.py
"""
Manages the state of all nodes in the simulation.

This module defines the ParticleSystem class, which owns the node
collection (positions, velocities, sizes and render style stored in
NumPy arrays) and the node factory used to spawn, append and recycle
nodes.
"""
import logging
import re
import numpy as np
from typing import Dict, Any, Optional

from constants import (
    MAX_CONNECTOR_LENGTH, NODE_COUNT_DIVISOR, NODE_SIZES, VELOCITY_JITTER,
    NODE_COLOR, NODE_LINE_WIDTH
)

# --- Data Contracts ---
#
# initial_node_count(width: int, height: int, divisor: float) -> int:
#   - Outputs: round(width * height / divisor), halves rounded up.
#
# class ParticleSystem:
#   - __init__(self, params: Dict[str, Any], width: int, height: int,
#              rng: Optional[np.random.Generator] = None):
#     - Inputs:
#       - params: Dictionary of simulation parameters from config.json.
#         - "seed": Optional[int] (ignored when rng is given)
#         - "max_connector_length": float
#         - "node_count_divisor": float
#         - "initial_node_count": Optional[int]
#         - "node_sizes": List[float]
#         - "velocity_jitter": List[float]
#       - width, height: dimensions of the canvas.
#       - rng: random source for every draw made by the factory.
#     - Side Effects: Creates the initial nodes inside the canvas.
#     - Invariants:
#       - self.positions, self.velocities: float64 arrays of shape (N, 2).
#       - self.sizes, self.line_widths: float64 arrays of shape (N,).
#       - self.colors: list of N color strings.
#       - Every size is > 0. N never decreases.
#
#   - create_node(self, **overrides) -> Dict[str, Any]:
#     - Outputs: a node placed just outside a random canvas edge, with
#       `overrides` applied on top of the generated values.
#   - reset_node(self, index: int, **overrides) -> None:
#     - Side Effects: Replaces every field of node `index` in place.
#   - add_node(self, **overrides) -> int:
#     - Side Effects: Appends a node. Outputs: its index.

NODE_FIELDS = ('x', 'y', 'size', 'color', 'line_width', 'vx', 'vy')

# Connectors append a two-digit alpha to the node color, so only the
# long '#rrggbb' form is accepted.
HEX_COLOR = re.compile(r"#[0-9a-fA-F]{6}")

# Spawning sides, in the order they are drawn from the random source.
SIDE_TOP, SIDE_LEFT, SIDE_BOTTOM, SIDE_RIGHT = range(4)


def initial_node_count(width: int, height: int, divisor: float) -> int:
    """Number of nodes created at start-up for a canvas of the given size."""
    return int(np.floor(width * height / divisor + 0.5))


class ParticleSystem:
    """
    A container for all nodes, managing their state via NumPy arrays.
    """
    def __init__(self, params: Dict[str, Any], width: int, height: int,
                 rng: Optional[np.random.Generator] = None):
        """
        Initializes the particle system.

        Args:
            params (Dict[str, Any]): Simulation parameters from config.
            width (int): The width of the canvas.
            height (int): The height of the canvas.
            rng (Optional[np.random.Generator]): Random source. Built from
                params['seed'] when omitted; a null seed gives an
                unseeded generator.
        """
        self.width = int(width)
        self.height = int(height)
        self.max_connector_length = float(params.get('max_connector_length', MAX_CONNECTOR_LENGTH))
        self.node_sizes = [float(s) for s in params.get('node_sizes', NODE_SIZES)]
        self.velocity_jitter = [float(v) for v in params.get('velocity_jitter', VELOCITY_JITTER)]
        self.node_color = params.get('node_color', NODE_COLOR)
        self.node_line_width = float(params.get('node_line_width', NODE_LINE_WIDTH))
        divisor = float(params.get('node_count_divisor', NODE_COUNT_DIVISOR))

        node_count = params.get('initial_node_count')

        self._validate(divisor, node_count)

        # All randomness of the factory flows through this generator so a
        # seeded run is fully reproducible.
        self.seed = params.get('seed')
        self.rng = rng if rng is not None else np.random.default_rng(self.seed)

        if node_count is None:
            node_count = initial_node_count(self.width, self.height, divisor)

        self.positions = np.zeros((0, 2), dtype=np.float64)
        self.velocities = np.zeros((0, 2), dtype=np.float64)
        self.sizes = np.zeros(0, dtype=np.float64)
        self.line_widths = np.zeros(0, dtype=np.float64)
        self.colors = []

        for _ in range(node_count):
            # Start-up nodes are scattered over the canvas instead of
            # entering from an edge.
            x = self._random_int(self.width)
            y = self._random_int(self.height)
            self.add_node(x=x, y=y)

        logging.info(
            f"ParticleSystem initialized with {self.count} nodes "
            f"on a {self.width}x{self.height} canvas."
        )
        logging.debug(
            f"Node data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Velocities shape: {self.velocities.shape}, "
            f"Sizes shape: {self.sizes.shape}"
        )

    def _validate(self, divisor: float, node_count: Optional[int]) -> None:
        problems = []
        if not isinstance(self.node_color, str) or not HEX_COLOR.fullmatch(self.node_color):
            problems.append(f"node_color {self.node_color!r} must be a '#rrggbb' hex string")
        if node_count is not None and (
            isinstance(node_count, bool) or not isinstance(node_count, int) or node_count < 0
        ):
            problems.append(f"initial_node_count ({node_count!r}) must be a non-negative integer or null")
        if self.width <= 0 or self.height <= 0:
            problems.append(f"canvas size {self.width}x{self.height} must be positive")
        if self.max_connector_length <= 0:
            problems.append(f"max_connector_length ({self.max_connector_length}) must be positive")
        if not self.node_sizes or min(self.node_sizes) <= 0:
            problems.append(f"node_sizes {self.node_sizes} must be a non-empty list of positive sizes")
        if not self.velocity_jitter:
            problems.append("velocity_jitter must not be empty")
        if divisor <= 0:
            problems.append(f"node_count_divisor ({divisor}) must be positive")
        if problems:
            msg = "Configuration error: " + "; ".join(problems) + "."
            logging.critical(msg)
            raise ValueError(msg)

    @property
    def count(self) -> int:
        return self.positions.shape[0]

    def _random_int(self, high: int) -> int:
        """Uniform integer in [0, high)."""
        return int(self.rng.integers(0, high))

    def _random_choice(self, values: list) -> float:
        return values[self._random_int(len(values))]

    def create_node(self, **overrides) -> Dict[str, Any]:
        """
        Generates the full state of a new node.

        The node is placed just outside a randomly chosen canvas edge, far
        enough that neither its body nor its connectors are visible, with
        the coordinate along that edge drawn uniformly. Any field given in
        `overrides` replaces the generated value afterwards, so an explicit
        position wins over the edge placement.
        """
        unknown = set(overrides) - set(NODE_FIELDS)
        if unknown:
            msg = f"Unknown node field(s): {sorted(unknown)}. Valid fields are {list(NODE_FIELDS)}."
            logging.critical(msg)
            raise ValueError(msg)

        spawning_side = self._random_int(4)
        size = self._random_choice(self.node_sizes)
        margin = size + self.max_connector_length

        if spawning_side == SIDE_TOP:
            x, y = self._random_int(self.width), -margin
        elif spawning_side == SIDE_LEFT:
            x, y = -margin, self._random_int(self.height)
        elif spawning_side == SIDE_BOTTOM:
            x, y = self._random_int(self.width), self.height + margin
        else:
            x, y = self.width + margin, self._random_int(self.height)

        node = {
            'x': float(x),
            'y': float(y),
            'size': size,
            'color': self.node_color,
            'line_width': self.node_line_width,
            'vx': self._random_choice(self.velocity_jitter),
            'vy': self._random_choice(self.velocity_jitter),
        }
        node.update(overrides)
        return node

    def _store_node(self, index: int, node: Dict[str, Any]) -> None:
        self.positions[index] = (node['x'], node['y'])
        self.velocities[index] = (node['vx'], node['vy'])
        self.sizes[index] = node['size']
        self.line_widths[index] = node['line_width']
        self.colors[index] = node['color']

    def reset_node(self, index: int, **overrides) -> None:
        """Recycles the slot at `index` as a freshly spawned node."""
        self._store_node(index, self.create_node(**overrides))

    def add_node(self, **overrides) -> int:
        """Appends a new node and returns its index."""
        node = self.create_node(**overrides)
        self.positions = np.vstack([self.positions, np.zeros((1, 2))])
        self.velocities = np.vstack([self.velocities, np.zeros((1, 2))])
        self.sizes = np.append(self.sizes, 0.0)
        self.line_widths = np.append(self.line_widths, 0.0)
        self.colors.append(node['color'])
        index = self.count - 1
        self._store_node(index, node)
        return index

    def get_node(self, index: int) -> Dict[str, Any]:
        """Returns a snapshot of node `index` as a plain dictionary."""
        return {
            'x': float(self.positions[index, 0]),
            'y': float(self.positions[index, 1]),
            'size': float(self.sizes[index]),
            'color': self.colors[index],
            'line_width': float(self.line_widths[index]),
            'vx': float(self.velocities[index, 0]),
            'vy': float(self.velocities[index, 1]),
        }
