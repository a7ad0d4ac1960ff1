"""
Salon Engine - AI Character Chat Backend

A FastAPI-based system for user-defined AI characters with per-character
knowledge, one-on-one conversations and multi-character group discussions.
"""

__version__ = "0.1.0"
