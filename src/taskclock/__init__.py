"""
taskclock

Temporal reasoning engine for voice-captured tasks: turns spoken transcripts
into scheduled tasks and keeps them ranked by decaying urgency.
"""

__version__ = "0.1.0"
