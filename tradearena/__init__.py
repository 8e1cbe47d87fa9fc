"""Trade Arena: competitions with a live, multi-viewer leaderboard."""

__version__ = "1.0.0"
