"""Domain layer: documents, findings, schema rules, and link semantics.

This layer depends only on stdlib, pydantic, and ruamel.yaml.
It must never import from services, infrastructure, commands, or config.
"""
