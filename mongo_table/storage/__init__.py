"""
Store-facing components for Mongo-Table.
"""

from .provisioner import SchemaProvisioner, provision
from .stream import DocumentStream, streamify

__all__ = [
    "SchemaProvisioner",
    "provision",
    "DocumentStream",
    "streamify",
]
