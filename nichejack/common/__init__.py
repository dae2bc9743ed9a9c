"""
Playing card and deck primitives.
"""
