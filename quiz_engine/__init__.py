"""
Quiz assessment and adaptive remediation engine.

Serves quiz questions one at a time, scores them, and drives remediation
loops and practice sessions over a read-only question repository.
"""

__version__ = "0.1.0"
