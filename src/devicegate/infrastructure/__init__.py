"""Infrastructure layer — list sources, the loader, and signal providers.

Everything that touches the filesystem, the network, or the host lives here.
"""
