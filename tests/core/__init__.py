"""
GRAPHWIRE - Core Tests
"""
