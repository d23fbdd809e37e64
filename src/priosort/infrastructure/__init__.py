"""Infrastructure layer — document stores.

Stores depend on the domain layer for pure parsing (infrastructure ->
domain) and must never import from services, commands, or output.
"""
