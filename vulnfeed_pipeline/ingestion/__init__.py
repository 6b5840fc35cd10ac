"""
Ingestion layer for vulnerability feeds.

Provides adapters that decode vendor feeds, normalize their records and
write them through the storage operations:
- Node.js Ecosystem Security Working Group (npm packages)
"""
from .base_adapter import BaseAdapter, NormalizedAdvisory, SourceHealth
from .decoder import DecodeError, decode_feed
from .node_adapter import AdvisoryKey, NodeAdapter
from .sources import Ecosystem, VulnSource, nested_bucket_names

__all__ = [
    "BaseAdapter",
    "NormalizedAdvisory",
    "SourceHealth",
    "DecodeError",
    "decode_feed",
    "AdvisoryKey",
    "NodeAdapter",
    "Ecosystem",
    "VulnSource",
    "nested_bucket_names",
]
