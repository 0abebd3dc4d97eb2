"""riftcoach - cohort-relative scoring engine for League of Legends match data."""

__version__ = "0.3.0"
