"""
Core constants — **Single Source of Truth** for project-wide magic numbers.

Any formula or business rule that references a numeric constant should
import it from here instead of hardcoding.  This avoids drift between
the dashboard list, the performance report and the overview, which all
classify FIRs by urgency.
"""

# ── Urgency Tier Thresholds ─────────────────────────────────────────
# Lower bound (inclusive, in days remaining) of each non-green tier:
#
#     d > 15         → safe (green)
#     10 <= d <= 15  → yellow
#     5 <= d < 10    → orange
#     0 < d < 5      → red
#     d <= 0         → exceeded
SAFE_ABOVE_DAYS: int = 15
YELLOW_MIN_DAYS: int = 10
ORANGE_MIN_DAYS: int = 5
RED_MIN_DAYS: int = 1

# ── Pagination ──────────────────────────────────────────────────────
DEFAULT_PAGE_SIZE: int = 50
MAX_PAGE_SIZE: int = 200

# ── Dashboard Overview ──────────────────────────────────────────────
MONTHLY_TREND_MONTHS: int = 6
RECENT_FIRS_LIMIT: int = 10
