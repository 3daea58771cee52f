"""
SubTrack - subscription renewal and notification engine.
"""

__version__ = "1.0.0"
