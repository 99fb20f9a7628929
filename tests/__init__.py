"""
GRAPHWIRE - Test Suite
"""
