from .client import MIRROR_NODE_URLS, MirrorNodeClient, MirrorNodeError

__all__ = ["MIRROR_NODE_URLS", "MirrorNodeClient", "MirrorNodeError"]
