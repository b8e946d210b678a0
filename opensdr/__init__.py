"""
OpenSDR -- session-backed LinkedIn prospecting engine.

Drives an authenticated Playwright session to find people, their employers
and their mutual connections, and reconciles search pages into structured
Profile records with a Gemini vision call.
"""

__version__ = "0.1.0"
