"""Point calculation for one team's scouted match entry.

Hoop weights follow the game rules: teleoperated high/mid/low score
3/2/1, and every ball scored during autonomous earns a 3 point bonus on
top. Only a successful team bridge 1 balance is worth points; the coop
bridge and team bridge 2 are tracked for statistics but do not score.
"""

from .models import BridgeAttempt, PerformanceCount

TELEOPERATED_POINTS = {'high': 3, 'mid': 2, 'low': 1}
AUTONOMOUS_BONUS = 3
BRIDGE_POINTS = 10


def hoop_points(count: PerformanceCount, bonus: int = 0) -> int:
    """Points for the balls in ``count``, with ``bonus`` added per ball."""
    return sum(
        getattr(count, bucket) * (points + bonus)
        for bucket, points in TELEOPERATED_POINTS.items()
    )


def calculate_score(autonomous: PerformanceCount, teleoperated: PerformanceCount,
                    coop: BridgeAttempt, bridge1: BridgeAttempt,
                    bridge2: BridgeAttempt) -> int:
    score = hoop_points(autonomous, AUTONOMOUS_BONUS) + hoop_points(teleoperated)
    if bridge1.succeeded:
        score += BRIDGE_POINTS
    return score
