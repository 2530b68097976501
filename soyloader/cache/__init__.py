from .content import ContentCache, content_hash

__all__ = ["ContentCache", "content_hash"]
