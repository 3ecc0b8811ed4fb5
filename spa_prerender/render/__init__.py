# File: spa_prerender/render/__init__.py
"""spa_prerender.render: route queue, wave runner, orchestrator, browser and writer."""
