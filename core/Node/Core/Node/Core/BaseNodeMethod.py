from abc import ABC, abstractmethod
from typing import Optional

from Node.Core.Form.Core.BaseForm import BaseForm

from .Data import NodeOutput


class BaseNodeMethod(ABC):

    async def setup(self):
        """
        Called by init() before the first execution.
        Default implementation does nothing.
        """
        pass

    @abstractmethod
    async def execute(self, previous_node_output: NodeOutput) -> NodeOutput:
        """
        Execute the node logic.
        """
        pass

    async def on_message(self, node_data: NodeOutput) -> NodeOutput:
        """
        Called when a waiting execution of this node is resumed with a message.
        Default implementation passes the input through.
        """
        return node_data

    def get_form(self) -> Optional[BaseForm]:
        """
        Get the associated form for this node, or None when it has no parameters.
        """
        return None
