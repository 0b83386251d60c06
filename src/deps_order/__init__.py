"""deps-order — leaf-first dependency ordering for Cargo projects and workspaces."""

__version__ = "0.1.0"
