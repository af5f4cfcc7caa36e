import structlog
from typing import Optional, Dict, Type
import pkgutil
import importlib
import inspect
from Node.Core.Node.Core.BaseNode import BaseNode, BlockingNode
from Node.Core.Node.Core.Data import NodeConfig

logger = structlog.get_logger(__name__)


class NodeRegistry:
    """
    Registry class responsible for discovering and creating node instances.
    """

    _node_registry: Optional[Dict[str, Type[BaseNode]]] = None
    _abstract_base_classes = {BaseNode, BlockingNode}

    @classmethod
    def _discover_node_classes(cls) -> Dict[str, Type[BaseNode]]:
        import Node.Nodes as Nodes
        discovered_classes = []

        def walk_packages(path, prefix):
            for _, modname, ispkg in pkgutil.iter_modules(path, prefix):
                try:
                    module = importlib.import_module(modname)
                except ImportError as e:
                    logger.error(f"Failed to import '{modname}'", error=str(e))
                    continue
                if ispkg:
                    walk_packages(module.__path__, modname + ".")
                    continue
                for _, obj in inspect.getmembers(module, inspect.isclass):
                    if obj.__module__ != modname:
                        continue
                    if issubclass(obj, BaseNode) and obj not in cls._abstract_base_classes and not inspect.isabstract(obj):
                        discovered_classes.append(obj)

        walk_packages(Nodes.__path__, Nodes.__name__ + ".")

        mapping = {node_class.identifier(): node_class for node_class in discovered_classes}
        logger.info(f"Auto-discovered {len(mapping)} node Types in Nodes Package", node_types=sorted(mapping))
        return mapping

    @classmethod
    def _ensure_registry_loaded(cls) -> None:
        if cls._node_registry is None:
            cls._node_registry = cls._discover_node_classes()

    @classmethod
    def node_types(cls) -> Dict[str, Type[BaseNode]]:
        cls._ensure_registry_loaded()
        return dict(cls._node_registry)

    @classmethod
    def create_node(cls, nodeConfig: NodeConfig, **kwargs) -> BaseNode:
        """
        Instantiate the node class registered for nodeConfig.type.
        Extra keyword arguments (e.g. host) go to the node constructor.
        """
        cls._ensure_registry_loaded()
        node_cls = cls._node_registry.get(nodeConfig.type)
        if node_cls:
            instance = node_cls(nodeConfig, **kwargs)
            logger.info("Initialized BaseNode Instance", node_class=node_cls.__name__, node_id=nodeConfig.id)
            return instance

        available_types = list(cls._node_registry.keys())
        raise ValueError(
            f"Unknown node type '{nodeConfig.type}' for node id '{nodeConfig.id}'. "
            f"Available types: {available_types}"
        )
