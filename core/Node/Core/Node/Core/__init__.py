from .BaseNode import BaseNode, BlockingNode


# Utilities
from .Data import PoolType, NodeConfig, NodeConfigData, NodeOutput, NodeItem, BinaryData, ExecutionCompleted
from .exceptions import NodeOperationError


__all__ = [
    'BaseNode', 'BlockingNode',
    'PoolType', 'NodeConfig', 'NodeConfigData', 'NodeOutput', 'NodeItem', 'BinaryData',
    'ExecutionCompleted', 'NodeOperationError',
]
