# constants.py
"""
Application-level constants.

These values are static and do not change between regenerations.
They are fundamental to the application's framework, such as rendering
properties, default window sizes, or the curated palettes, and are not
part of the run configuration.
"""

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (DEFAULT_WINDOW_SIZE).
FULLSCREEN = False
DEFAULT_WINDOW_SIZE = (1200, 800)
FPS = 60
BACKGROUND_COLOR_HSB = (200, 40, 20)  # Deep teal
OUTLINE_COLOR_HSB = (0, 0, 15)        # Near black, used behind beads

# --- Layout defaults (overridable through the "layout" config section) ---
GRID_DIVISIONS = 9
CELL_FILL_PROBABILITY = 0.8
CELL_JITTER = 0.25
RADIUS_RANGE = (0.55, 1.05)
OVERLAP_FACTOR = 0.85
NEIGHBORS_PER_WHEEL = 2
DOT_GRID_DIVISIONS = 28
DOT_SKIP_PROBABILITY = 0.6
DOT_JITTER = 0.3

# Geometric tolerances for links and background dots. These are part of the
# layout invariants and are not configurable.
LINK_OVERLAP_FACTOR = 0.95
LINK_BLOCK_FACTOR = 0.9
DOT_EXCLUSION_FACTOR = 0.9

# --- Animation defaults (overridable through the "animation" config section) ---
# Wall-clock seconds are multiplied by this before driving the noise.
TIME_SCALE = 0.1
# Horizontal scroll speed in pixels per second.
SCROLL_SPEED = 30.0
DOT_DRIFT_FREQUENCY = 0.2

# --- Noise lattice ---
NOISE_TABLE_SIZE = 4096
NOISE_OCTAVES = 4
NOISE_FALLOFF = 0.5

# A curated list of base colors in HSB (hue 0-360, saturation and
# brightness 0-100). Picks are perturbed slightly around these.
BASE_PALETTE_HSB = [
    (340, 90, 100),  # Magenta
    (25, 95, 100),   # Orange
    (55, 90, 100),   # Yellow
    (200, 60, 90),   # Cyan-blue
    (120, 70, 90),   # Green
    (0, 0, 100),     # White
    (0, 0, 15)       # Black
]

# Accent colors for the background dots, used without perturbation.
DOT_PALETTE_HSB = [
    (0, 0, 100),     # White
    (0, 0, 15),      # Black
    (25, 95, 100),   # Orange
    (340, 90, 100)   # Magenta
]
