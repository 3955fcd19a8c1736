"""Contains global constants and default values used throughout the project."""

from tilecollapse.enums import AdjacencyMethod, CompletionBehavior


# === SOLVER CONSTANTS ===

# Upper bound of the random jitter added to each cell's entropy to break ties.
ENTROPY_NOISE_MAX: float = 0.00000001

# === MODEL CONSTANTS ===

TILE_SIZE_DEFAULT: int = 4
TILE_SIZE_MIN_LIMIT: int = 1
TILE_SIZE_MAX_LIMIT: int = 64

# Output size in pixels; the grid size in cells is the output size divided by the tile size.
OUTPUT_SIZE_DEFAULT: int = 64
OUTPUT_SIZE_MIN_LIMIT: int = 1
OUTPUT_SIZE_MAX_LIMIT: int = 1024

PIXEL_SCALE_DEFAULT: int = 4
PIXEL_SCALE_MIN_LIMIT: int = 1
PIXEL_SCALE_MAX_LIMIT: int = 16

RANDOM_SEED_MAX: int = 999999999

ADJACENCY_METHOD_DEFAULT: AdjacencyMethod = AdjacencyMethod.ADJACENCY
COMPLETION_BEHAVIOR_DEFAULT: CompletionBehavior = CompletionBehavior.KEEP_OPEN

# === DRIVER CONSTANTS ===

STEPS_PER_TICK_DEFAULT: int = 20
STEPS_PER_TICK_MIN_LIMIT: int = 1
STEPS_PER_TICK_MAX_LIMIT: int = 10000

# Interval between two timer ticks of the generation loop (in milliseconds).
TIMER_INTERVAL_MS: int = 0

# === LOGGING CONSTANTS ===

LOGGER_NAME: str = "tilecollapse"
LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT: int = 3

# === VIEW CONSTANTS ===

LAYOUT_LEFT_SIDE_MAX_WIDTH: int = 350
LAYOUT_LEFT_SIDE_VBOX_SPACING: int = 20
LAYOUT_GRID_MIDDLE_COLUMN_MIN_WIDTH: int = 20
LAYOUT_GRID_RIGHT_COLUMN_MIN_WIDTH: int = 150
