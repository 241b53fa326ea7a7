"""
Step Scientists progression backend.

Converts real-world step counts into in-game cells and experience, and
derives lifetime achievement bonuses and magnifying-glass milestones from a
player's lifetime step total.
"""

__version__ = "1.0.0"
