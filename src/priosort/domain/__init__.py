"""Domain layer — priority parsing, ordering, cycle state, outline format.

This layer depends only on stdlib.
It must never import from services, infrastructure, commands, or config.
"""
