"""
Integrity Proctor - Proctoring Session Engine

Turns a periodic stream of perception signals into a scored timeline:
- Sustained gaze diversion (focus lost)
- Sustained face absence
- Multiple-person presence
- Prohibited objects (phones, books/paper, other devices)

Each session carries an Integrity Score (0-100) that only goes down.
"""

from .api import router

__all__ = ["router"]
