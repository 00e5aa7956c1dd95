"""
Terminal front end for the quiz engine.
"""
