"""
Node integration module.

Provides the abstract node interface and the algod REST adapter.
"""

from algotx.node.interface import NodeInterface, NodeStatus, SuggestedParams
from algotx.node.algod import AlgodAdapter

__all__ = [
    "NodeInterface",
    "NodeStatus",
    "SuggestedParams",
    "AlgodAdapter",
]
