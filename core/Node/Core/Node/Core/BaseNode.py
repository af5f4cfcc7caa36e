from abc import ABC
from typing import Any, Dict, Optional
import re

import structlog
from jinja2 import Template
from django import forms
from django.forms.utils import ErrorDict

from log_safe import log_safe_output
from .Data import NodeConfig, NodeOutput, ExecutionCompleted
from .BaseNodeProperty import BaseNodeProperty
from .BaseNodeMethod import BaseNodeMethod

logger = structlog.get_logger(__name__)

# Jinja template detection pattern
JINJA_PATTERN = re.compile(r'\{\{.*?\}\}', re.DOTALL)


def contains_jinja_template(value) -> bool:
    """Check if a value contains Jinja template syntax."""
    if value is None:
        return False
    return bool(JINJA_PATTERN.search(str(value)))


class BaseNode(BaseNodeProperty, BaseNodeMethod, ABC):
    """
    Dont Use This Class Directly. Use One of the Subclasses Instead.
    This class is used to define the base node class and is not meant to be instantiated directly.
    use for type hinting and inheritance.
    """

    def __init__(self, node_config: NodeConfig):
        self.node_config = node_config
        self.form = self.get_form()
        self._populate_form()
        self.execution_count = 0

    @property
    def name(self) -> str:
        """Workflow-level name of this node; falls back to its id."""
        return self.node_config.name or self.node_config.id

    def _form_data(self) -> Dict[str, Any]:
        if self.node_config.data is None:
            return {}
        return self.node_config.data.form or {}

    def _populate_form(self):
        """
        Populate the form with the data from the config.
        """
        if self.form is not None:
            for key, value in self._form_data().items():
                self.form.update_field(key, value)
            logger.info(
                "Form Populated",
                form=log_safe_output(self.form.get_all_field_values()),
                node_id=self.node_config.id,
                identifier=f"{self.__class__.__name__}({self.identifier()})",
            )

    def is_ready(self) -> bool:
        """
        Validate that the node has all required config fields.
        Fields holding Jinja templates are only checked for presence;
        full validation happens at runtime after template rendering.
        """
        if self.form is None:
            return True

        self.form._errors = None
        form_data = self._form_data()

        for field_name, field in self.form.fields.items():
            value = form_data.get(field_name)

            if contains_jinja_template(value):
                if field.required and str(value).strip() == '':
                    self._add_form_error(field_name, 'This field is required.')
            else:
                try:
                    field.clean(value)
                except forms.ValidationError as e:
                    self._add_form_error(field_name, e.messages)

        return not bool(self.form._errors)

    def _add_form_error(self, field_name, messages):
        if self.form._errors is None:
            self.form._errors = ErrorDict()
        if isinstance(messages, str):
            messages = [messages]
        self.form._errors[field_name] = self.form.error_class(messages)

    async def init(self):
        """
        Initialize the node.
        Called before execute; validates the node and sets up resources.
        """
        if not self.is_ready():
            raise ValueError(f"Node {self.node_config.id} is not ready: {self.form.errors}")
        await self.setup()

    def template_context(self, node_data: NodeOutput) -> Dict[str, Any]:
        """
        Variables available to Jinja templates in form fields.

        `json` is the first input item, since parameters are resolved once per
        execution; `items` exposes every item's JSON.
        """
        items = node_data.get_items()
        return {
            'data': node_data.data,
            'json': items[0].json_data if items else {},
            'items': [item.json_data for item in items],
        }

    def populate_form_values(self, node_data: NodeOutput) -> None:
        """
        Render Jinja templates in form fields with runtime data.
        Called before execute() to populate form with actual values.

        Raises:
            ValueError: If form validation fails after rendering.
        """
        if self.form is None:
            return

        form_data = self._form_data()
        context = None

        for field_name in self.form.fields:
            raw_value = form_data.get(field_name)
            if isinstance(raw_value, str) and contains_jinja_template(raw_value):
                if context is None:
                    context = self.template_context(node_data)
                rendered_value = Template(raw_value).render(**context)
                self.form.update_field(field_name, rendered_value)
                logger.debug(
                    "Rendered template field",
                    field=field_name,
                    raw=log_safe_output(raw_value),
                    rendered=log_safe_output(rendered_value),
                    node_id=self.node_config.id,
                )

        if not self.form.validate():
            raise ValueError(f"Form validation failed after rendering: {self.form.errors}")
        logger.info(
            "Form validation passed",
            form=log_safe_output(self.form.get_all_field_values()),
            node_id=self.node_config.id,
            identifier=f"{self.__class__.__name__}({self.identifier()})",
        )

    async def run(self, node_data: NodeOutput) -> NodeOutput:
        """
        Main entry point for node execution.
        Populates form values with runtime data, then executes the node.
        """
        if isinstance(node_data, ExecutionCompleted):
            await self.cleanup(node_data)
            logger.warning("Cleanup completed", node_id=self.node_config.id, identifier=f"{self.__class__.__name__}({self.identifier()})")
            return node_data

        self.populate_form_values(node_data)
        output = await self.execute(node_data)
        self.execution_count += 1
        return output

    async def cleanup(self, node_data: Optional[NodeOutput] = None):
        """
        Cleanup the node resources.
        Called when the node receives an ExecutionCompleted input.
        """
        pass


class BlockingNode(BaseNode, ABC):
    """
    Performs work that must be completed prior to continuation.
    The runner awaits the Blocking node before proceeding downstream.
    """
    pass
