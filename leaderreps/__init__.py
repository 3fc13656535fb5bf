"""LeaderReps personalized leadership development plan service."""
