# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They are the defaults for every key of `config.json`: a key missing
from the configuration file falls back to the value defined here.
"""

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (WINDOW_WIDTH x WINDOW_HEIGHT).
FULLSCREEN = False
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 720
FPS = 60
BACKGROUND_COLOR = (24, 24, 24) # Dark Gray
WINDOW_TITLE = "Gravity Nodes"

# --- Physics ---
# Nodes further apart than this neither pull each other nor get connected.
MAX_CONNECTOR_LENGTH = 300
GRAVITY_FACTOR = 0.00001

# --- Node Factory ---
# One node per this many square pixels of canvas at start-up.
NODE_COUNT_DIVISOR = 130000
NODE_SIZES = [10, 20]
# Each velocity axis is drawn independently from this set.
VELOCITY_JITTER = [-0.1, 0.0, 0.1]

# --- Node Style ---
NODE_COLOR = "#ffeedd"
NODE_LINE_WIDTH = 3
CONNECTOR_LINE_WIDTH = 2
# Alpha (0-255) of a connector between two almost coincident nodes.
# Connectors fade linearly to 0 at MAX_CONNECTOR_LENGTH.
CONNECTOR_MAX_ALPHA = 64

# --- Run Control ---
LOG_THROTTLE_STEPS = 300
