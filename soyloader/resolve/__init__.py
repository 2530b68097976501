from .globs import GlobResolver

__all__ = ["GlobResolver"]
