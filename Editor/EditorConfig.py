import logging
from colorlog import ColoredFormatter

#########################################
# Logging Setup
#########################################

LOG_FORMAT = "%(log_color)s%(levelname)s: %(message)s"
LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'bold_red',
}

def setup_logging(level=logging.INFO):
    """Attach the colored stream handler to the root logger (only once)"""
    logger = logging.getLogger()
    for existing in logger.handlers:
        if isinstance(existing.formatter, ColoredFormatter):
            logger.setLevel(level)
            return existing

    # Create handler
    handler = logging.StreamHandler()
    # Set up the colored formatter
    formatter = ColoredFormatter(LOG_FORMAT, log_colors=LOG_COLORS)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler

#########################################
# Editor Data Setup
#########################################

EDITOR_VERSION = "v0.7.0"           # Editor Version Number

# Viewport limits
MIN_SCALE = 0.2
MAX_SCALE = 1000.0
DEFRACTION_MARGIN = 0.0025          # Scales this close to 1.0 snap to exactly 1.0

# Zoom animation
ZOOM_TICK_SPEED = 7.5               # Wheel ticks per full scale factor
ZOOM_ANIMATION_FRAMES = 20
ZOOM_ANIMATION_PAUSE = 6            # Milliseconds between frames
SMOOTH_ZOOM_DEFAULT = True

# Selection
SELECTION_THRESHOLD = 5             # World pixels, independent of zoom
BUTTON_PRIMARY = 1                  # Tk button numbering
BUTTON_MIDDLE = 2
BUTTON_SECONDARY = 3

# Object limits
OBJECT_LIMIT = 256
DEFAULT_DATA_LENGTH = 8
TYPE_HEX_DIGITS = 4

# Allocation address range (end exclusive)
ALLOC_START = 0xE140
ALLOC_END = 0xFB80
ALLOC_BLOCK_SIZE = 0x40

# Region geometry
REGION_WIDTH = 0x100
REGION_HEIGHT = 0x100

# Stage naming
STAGES_PER_ROUND = 3

#########################################
# Marker Rendering Setup
#########################################

POINT_MULT = 5                      # Base marker diameter in display pixels
STACK_SCALE_THRESHOLD = 0.25        # Stack counts hidden at or below this scale
STACK_FULL_ALPHA_SCALE = 1.5        # Stack counts fully opaque above this scale
STACK_COLOR = (255, 0, 0)
SELECTION_COLOR = (255, 0, 0)
SELECTION_DASH = (7, 5)
DEFAULT_FILL_COLOR = (0, 0, 0, 255)
DEFAULT_OUTLINE_COLOR = (255, 0, 0, 255)
BACKGROUND_COLOR = (0, 0, 0, 255)

# Address dialog colors
EMPTY_BLOCK_COLOR = '#c0ffc0'
USED_BLOCK_COLOR = '#c8c8c8'

# Outline color per object type
TYPE_OUTLINE_COLORS = {
    0x0001: (255, 255, 255, 255),
    0x0002: (128, 128, 128, 255),
    0x0004: (255, 255, 255, 255),
    0x0005: (160, 0, 0, 255),
    0x000C: (255, 0, 0, 255),
    0x000D: (150, 0, 200, 255),
    0x000E: (255, 128, 0, 255),
    0x0014: (0, 255, 0, 255),
    0x0015: (255, 0, 255, 255),
    0x0016: (64, 64, 222, 255),
    0x0017: (128, 128, 222, 255),
    0x0018: (224, 224, 0, 255),
    0x0019: (255, 0, 0, 255),
    0x001B: (64, 64, 64, 255),
    0x001C: (255, 0, 255, 255),
    0x001E: (200, 64, 16, 255),
    0x001F: (255, 255, 255, 255),
    0x0020: (158, 255, 250, 255),
    0x0021: (20, 224, 163, 255),
    0x0023: (47, 163, 51, 255),
    0x0024: (72, 72, 72, 255),
    0x0025: (170, 255, 0, 255),
    0x0026: (207, 187, 104, 255),
    0x0029: (162, 207, 14, 255),
    0x002A: (140, 220, 255, 255),
    0x002D: (16, 224, 16, 255),
    0x002E: (224, 186, 164, 255),
    0x002F: (255, 0, 200, 255),
    0x0030: (210, 194, 24, 255),
    0x0034: (255, 175, 10, 255),
    0x0035: (160, 32, 160, 255),
    0x0036: (150, 190, 210, 255),
    0x0037: (250, 106, 40, 255),
    0x0049: (194, 0, 0, 255),
    0x004C: (234, 212, 0, 255),
    0x0050: (0, 0, 255, 255),
    0x0055: (0, 255, 0, 255),
    0x0057: (64, 224, 255, 255),
    0x0059: (36, 72, 255, 255),
    0x005A: (128, 128, 128, 255),
    0x005B: (58, 96, 255, 255),
    0x005D: (160, 80, 48, 255),
    0x005F: (0, 128, 64, 255),
    0x0060: (16, 164, 96, 255),
    0x0061: (128, 0, 64, 255),
    0x0062: (255, 255, 0, 255),
    0x0065: (112, 0, 0, 255),
    0x007D: (255, 0, 0, 255),
}

# Translucent fill color per object type
TYPE_FILL_COLORS = {
    0x0001: (255, 0, 0, 128),
    0x0002: (128, 128, 128, 128),
    0x0004: (128, 128, 128, 128),
    0x0005: (192, 192, 0, 152),
    0x000C: (255, 255, 0, 128),
    0x000D: (150, 0, 200, 128),
    0x000E: (255, 128, 0, 128),
    0x0014: (255, 255, 255, 128),
    0x0015: (255, 255, 255, 128),
    0x0016: (64, 64, 222, 128),
    0x0017: (80, 255, 110, 128),
    0x0018: (200, 64, 16, 128),
    0x0019: (255, 0, 0, 128),
    0x001B: (121, 121, 148, 128),
    0x001C: (0, 0, 255, 128),
    0x001E: (255, 255, 0, 196),
    0x001F: (255, 255, 128, 128),
    0x0020: (133, 222, 242, 128),
    0x0021: (136, 20, 224, 128),
    0x0023: (180, 20, 60, 160),
    0x0024: (150, 190, 210, 196),
    0x0025: (128, 255, 128, 128),
    0x0026: (33, 0, 107, 128),
    0x0029: (255, 95, 10, 160),
    0x002A: (64, 64, 164, 128),
    0x002D: (32, 196, 96, 128),
    0x002E: (200, 64, 16, 128),
    0x002F: (209, 202, 59, 128),
    0x0030: (240, 224, 16, 128),
    0x0034: (162, 207, 14, 160),
    0x0035: (128, 128, 128, 128),
    0x0036: (160, 32, 160, 128),
    0x0037: (250, 106, 40, 128),
    0x0049: (255, 255, 128, 128),
    0x004C: (237, 7, 255, 192),
    0x0050: (0, 0, 255, 128),
    0x0055: (0, 255, 0, 128),
    0x0057: (64, 224, 255, 128),
    0x0059: (64, 96, 224, 128),
    0x005A: (0, 0, 255, 128),
    0x005B: (49, 102, 236, 128),
    0x005D: (0, 0, 0, 128),
    0x005F: (232, 210, 128, 128),
    0x0060: (200, 196, 64, 128),
    0x0061: (128, 0, 64, 128),
    0x0062: (255, 255, 0, 128),
    0x0065: (72, 64, 64, 144),
    0x007D: (0, 255, 255, 128),
}
