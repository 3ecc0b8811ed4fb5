# File: spa_prerender/parser/__init__.py
"""spa_prerender.parser: HTML helpers used for route discovery."""
