"""Domain layer — package identities, errors, and command templates.

This layer depends only on the stdlib.
It must never import from services, infrastructure, commands, or config.
"""
