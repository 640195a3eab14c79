GRID_SIZE = 8
TOKEN_TYPES = 6
EMPTY = -1

POINTS_PER_CELL = 10
ROUND_DURATION_SEC = 120
# Tokens outlive the round by a few seconds so an end-of-round submit still verifies.
ROUND_TOKEN_TTL_SEC = 130
MAX_SCORE = 500000

LEADERBOARD_LIMIT = 50
WINNER_COUNT = 3
LEADERBOARD_TIMEZONE = "Asia/Dhaka"
NICKNAME_MAX_LEN = 20
DEFAULT_NICKNAME = "Guest"

# Cascade loop guard; only a degenerate alphabet (e.g. one token type) gets near it.
CASCADE_SAFETY_CAP = 50
GENERATION_MAX_ATTEMPTS = 200

# Presentation pacing (seconds) between cascade phases.
SWAP_ANIM_SEC = 0.12
CLEAR_ANIM_SEC = 0.12
FALL_ANIM_SEC = 0.12
REFILL_ANIM_SEC = 0.14

# Display names for token types, index-aligned with the type ids.
TOKEN_NAMES = ('red', 'green', 'blue', 'yellow', 'purple', 'cyan')
