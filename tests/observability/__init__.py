"""
GRAPHWIRE - Observability Tests
"""
