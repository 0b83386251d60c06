"""Infrastructure layer — graph engine, Cargo metadata, and process spawning.

This layer depends on stdlib, NetworkX, and the domain value types.
It must never import from services, commands, or output.
"""
