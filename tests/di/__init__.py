"""
GRAPHWIRE - Dependency Injection Tests

Container resolution, service locator ordering and loading, rule-based
injection.
"""
