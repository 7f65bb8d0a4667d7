"""Domain layer — signals, fingerprints, access lists, and the gate policy.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
