"""
HTTP API for the quiz engine.
"""
