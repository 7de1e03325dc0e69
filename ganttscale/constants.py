HEADER_PRIMARY_HEIGHT = 20
HEADER_SECONDARY_HEIGHT = 20
HEADER_HEIGHT = HEADER_PRIMARY_HEIGHT + HEADER_SECONDARY_HEIGHT
DEFAULT_ROW_HEIGHT = 32
LABEL_WIDTH = 260
INDENT_STEP = 12

DEFAULT_ZOOM_LEVEL = "quarter-month"
DEFAULT_ZOOM_FACTOR = 1.0
MIN_EFFECTIVE_DAY_WIDTH = 3.0
ZOOM_FACTOR_EPSILON = 0.001
DEFAULT_ZOOM_STEP = 0.1

MIN_TASK_WIDTH = 12.0
TASK_BAR_HEIGHT = 20.0
TASK_VERTICAL_MARGIN = 2.0
OVERFLOW_INDICATOR_WIDTH = 16.0
TIMELINE_PADDING_DAYS = 7
EMPTY_RANGE_DAYS_BEFORE = 30
EMPTY_RANGE_DAYS_AFTER = 90

# Monday, matching datetime.date.weekday()
DEFAULT_WEEK_START = 0

TOOLTIP_HIDDEN_THRESHOLD = 0.5
TOOLTIP_LEFT_ARROW = "←"
TOOLTIP_RIGHT_ARROW = "→"

DEFAULT_CULTURE = "en-US"
