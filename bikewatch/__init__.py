"""
Bikewatch - bike-share station traffic on top of the bike-lane network.
"""

__version__ = "1.0.0"
