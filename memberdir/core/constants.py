"""Transport limits and search defaults shared across layers.

Values mirror the LINE Messaging API limits for Flex carousels, text
messages and postback actions.
"""

# Carousel card counts. The operating cap leaves room for the "view more" card.
CAROUSEL_HARD_CAP = 12
CAROUSEL_OPERATING_CAP = 7

# Serialized Flex message size (UTF-8 bytes of the JSON message object).
FLEX_MESSAGE_MAX_BYTES = 50_000
MESSAGE_BYTE_BUDGET = 45_000

# Text and action limits (characters).
TEXT_MESSAGE_MAX_CHARS = 5_000
ALT_TEXT_MAX_CHARS = 400
POSTBACK_DATA_MAX_CHARS = 300
BUTTON_LABEL_MAX_CHARS = 20

# Plain-text fallback: fixed preview count keeps the text size bounded.
TEXT_PREVIEW_COUNT = 5

# Search defaults
MAX_PAGE_LIMIT = 50
MAX_TERM_LENGTH = 200

# Highest page number a request or pagination token may name.
MAX_PAGE_NUMBER = 10_000
