"""Service layer: the validation pipeline, reports, and watch mode.

Services may import from domain, infrastructure, and plugins.
They must never import from commands or output.
"""
