from abc import ABC, abstractmethod
from typing import List

from .Data import PoolType


class BaseNodeProperty(ABC):
    """
    Node identification, versioning and port metadata.

    Subclasses must implement execution_pool and identifier.
    """

    @property
    @abstractmethod
    def execution_pool(self) -> PoolType:
        """
        The preferred execution pool for this node.
        """
        pass

    @classmethod
    @abstractmethod
    def identifier(cls) -> str:
        """
        Return the node type identifier (kebab-case string).
        Used to map node types from workflow definitions to node classes.
        """
        pass

    @classmethod
    def supported_versions(cls) -> List[float]:
        """Type versions this node implements."""
        return [1.0]

    @classmethod
    def default_version(cls) -> float:
        """Version used when the workflow definition does not pin one."""
        return cls.supported_versions()[-1]

    @property
    def version(self) -> float:
        """
        Type version from the node config, or the default version.

        Raises:
            ValueError: If the configured version is not supported.
        """
        configured = self.node_config.get_config_value('version')
        if configured is None:
            return self.default_version()
        version = float(configured)
        if version not in self.supported_versions():
            raise ValueError(
                f"Unsupported version {configured} for node type '{self.identifier()}'. "
                f"Supported: {self.supported_versions()}"
            )
        return version

    @property
    def label(self) -> str:
        """Display label; defaults to the class name."""
        return self.__class__.__name__

    @property
    def description(self) -> str:
        return ""

    @property
    def icon(self) -> str:
        return ""

    @property
    def input_ports(self) -> list:
        """
        Define input ports for this node.
        Default is one 'default' input port.
        """
        return [{"id": "default", "label": "In"}]

    @property
    def output_ports(self) -> list:
        """
        Define output ports for this node.
        Default is one 'default' output port.
        """
        return [{"id": "default", "label": "Out"}]
