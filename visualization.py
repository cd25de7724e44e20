# visualization.py
"""
Handles the visualization of the node simulation using Pygame.
"""
import logging
import pygame
import numpy as np
from particle import ParticleSystem
from constants import (
    BACKGROUND_COLOR, FULLSCREEN, WINDOW_WIDTH, WINDOW_HEIGHT, WINDOW_TITLE,
    FPS, MAX_CONNECTOR_LENGTH, CONNECTOR_LINE_WIDTH, CONNECTOR_MAX_ALPHA
)
from typing import List, Optional, Tuple


# --- Data Contracts ---
#
# class PointerState:
#   - Plain data written by event handling and read once per frame by the
#     driver loop: last known pointer coordinates, a button flag and the
#     queue of requested spawn positions.
#
# handle_event(event: pygame.event.Event, pointer: PointerState) -> bool:
#   - Outputs: False if the event asks the application to quit.
#   - Side Effects: Updates `pointer`.
#
# class Visualizer:
#   - __init__(self, params: Optional[dict] = None,
#              max_connector_length: float = MAX_CONNECTOR_LENGTH):
#     - Inputs:
#       - params: "visualization" section of config.json.
#         - "fullscreen": bool
#         - "window_width", "window_height": int
#         - "connector_line_width": int
#         - "connector_max_alpha": int
#     - Side Effects: Initializes Pygame and creates a display surface.
#
#   - process_events(self, pointer: PointerState) -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#
#   - draw(self, particles: ParticleSystem) -> None:
#     - Side Effects: Renders connectors and nodes, flips the display and
#       waits for the next frame.

class PointerState:
    """Pointer input gathered between two frames."""
    def __init__(self):
        self.x: Optional[float] = None
        self.y: Optional[float] = None
        # Tracked for completeness; nothing reads it.
        self.is_down = False
        self.pending_spawns: List[Tuple[float, float]] = []

    def move_to(self, pos) -> None:
        self.x, self.y = float(pos[0]), float(pos[1])

    def request_spawn(self) -> None:
        if self.x is None or self.y is None:
            logging.warning("Spawn requested before any pointer position was known. Ignoring.")
            return
        self.pending_spawns.append((self.x, self.y))

    def drain_spawns(self) -> List[Tuple[float, float]]:
        spawns, self.pending_spawns = self.pending_spawns, []
        return spawns


def handle_event(event, pointer: PointerState) -> bool:
    """
    Applies a single Pygame event to the pointer state.

    Returns:
        bool: False if the application should exit, True otherwise.
    """
    if event.type == pygame.QUIT:
        logging.info("Quit event received. Shutting down visualizer.")
        return False

    if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
        logging.info("ESC key pressed. Shutting down visualizer.")
        return False

    if event.type == pygame.MOUSEMOTION:
        pointer.move_to(event.pos)
    elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
        # The press position is the most recent pointer position we know.
        pointer.move_to(event.pos)
        pointer.is_down = True
        pointer.request_spawn()
    elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
        pointer.is_down = False

    return True


def connector_alpha(distance: float, max_connector_length: float = MAX_CONNECTOR_LENGTH,
                    max_alpha: int = CONNECTOR_MAX_ALPHA) -> int:
    """Alpha of a connector, fading linearly from max_alpha to 0 over the radius."""
    ratio = distance / max_connector_length
    return int(np.floor(max_alpha - ratio * max_alpha))


def connector_color(base_color: str, distance: float,
                    max_connector_length: float = MAX_CONNECTOR_LENGTH,
                    max_alpha: int = CONNECTOR_MAX_ALPHA) -> str:
    """The node's '#rrggbb' color with the connector alpha appended as two hex digits."""
    alpha = connector_alpha(distance, max_connector_length, max_alpha)
    return f"{base_color}{alpha:02x}"


def find_connectors(positions: np.ndarray, max_connector_length: float = MAX_CONNECTOR_LENGTH):
    """
    Finds every ordered pair of nodes close enough to be connected.

    Both (i, j) and (j, i) are returned, in row-major order, so each
    connector is drawn once from each end.

    Returns:
        Tuple[np.ndarray, np.ndarray, np.ndarray]: source indices, target
        indices and distances.
    """
    delta = positions[:, np.newaxis, :] - positions[np.newaxis, :, :]
    distances = np.hypot(delta[..., 0], delta[..., 1])
    mask = (distances > 0) & (distances < max_connector_length)
    sources, targets = np.nonzero(mask)
    return sources, targets, distances[sources, targets]


class Visualizer:
    """
    Renders the node collection and collects pointer input.
    """
    def __init__(self, params: Optional[dict] = None,
                 max_connector_length: float = MAX_CONNECTOR_LENGTH):
        """
        Initializes Pygame and the display window.

        Args:
            params (Optional[dict]): The "visualization" config section.
            max_connector_length (float): Interaction radius of the
                simulation, beyond which no connector is drawn.
        """
        params = params if params is not None else {}

        self.max_connector_length = float(max_connector_length)
        self.connector_line_width = int(params.get('connector_line_width', CONNECTOR_LINE_WIDTH))
        self.connector_max_alpha = int(params.get('connector_max_alpha', CONNECTOR_MAX_ALPHA))
        # The alpha is appended to the node color as exactly two hex digits.
        if not 0 <= self.connector_max_alpha <= 255:
            msg = (
                f"Configuration error: connector_max_alpha "
                f"({self.connector_max_alpha}) must be between 0 and 255."
            )
            logging.critical(msg)
            raise ValueError(msg)

        pygame.init()

        if params.get('fullscreen', FULLSCREEN):
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width = params.get('window_width', WINDOW_WIDTH)
            height = params.get('window_height', WINDOW_HEIGHT)
            self.screen = pygame.display.set_mode((width, height))

        # The canvas size is read once; resizing is not supported.
        self.sim_width = width
        self.sim_height = height

        self.background_color = pygame.Color(*params.get('background_color', BACKGROUND_COLOR))
        self.fps = params.get('fps', FPS)

        # Connectors are translucent, so they go on their own layer which is
        # cleared and blitted once per frame.
        self.connector_surface = pygame.Surface((self.sim_width, self.sim_height), pygame.SRCALPHA)

        pygame.display.set_caption(WINDOW_TITLE)
        self.clock = pygame.time.Clock()

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def process_events(self, pointer: PointerState) -> bool:
        """
        Drains the Pygame event queue into `pointer`.

        Returns:
            bool: False if the simulation should exit, True otherwise.
        """
        running = True
        for event in pygame.event.get():
            if not handle_event(event, pointer):
                running = False
        return running

    def _draw_connectors(self, particles: ParticleSystem):
        """Renders the fading connectors onto the translucent layer."""
        self.connector_surface.fill((0, 0, 0, 0))
        sources, targets, distances = find_connectors(particles.positions, self.max_connector_length)
        for i, j, distance in zip(sources, targets, distances):
            color = connector_color(
                particles.colors[i], distance,
                self.max_connector_length, self.connector_max_alpha
            )
            start = particles.positions[i]
            end = particles.positions[j]
            pygame.draw.line(
                self.connector_surface,
                pygame.Color(color),
                (float(start[0]), float(start[1])),
                (float(end[0]), float(end[1])),
                self.connector_line_width
            )
        self.screen.blit(self.connector_surface, (0, 0))

    def draw(self, particles: ParticleSystem) -> None:
        """
        Draws all connectors and nodes for the current frame.
        """
        # 1. The canvas is cleared every frame, there are no trails.
        self.screen.fill(self.background_color)

        # 2. Connectors first so that node bodies stay opaque on top.
        self._draw_connectors(particles)

        # 3. Nodes as filled circles.
        for i in range(particles.count):
            pos = particles.positions[i]
            pygame.draw.circle(
                self.screen,
                pygame.Color(particles.colors[i]),
                (float(pos[0]), float(pos[1])),
                float(particles.sizes[i])
            )

        pygame.display.flip()
        self.clock.tick(self.fps)

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()
