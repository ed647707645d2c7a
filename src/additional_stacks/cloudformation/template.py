"""
CloudFormation template generation for additional stacks.
"""

import json
from typing import Any, Dict

from ..config import StackDefinition

TEMPLATE_FORMAT_VERSION = "2010-09-09"

# Template section -> StackDefinition attribute
TEMPLATE_SECTIONS = [
    ("Conditions", "conditions"),
    ("Mappings", "mappings"),
    ("Metadata", "metadata"),
    ("Outputs", "outputs"),
    ("Parameters", "parameters"),
    ("Resources", "resources"),
    ("Transform", "transform"),
]


def build_template(stack_name: str, stack: StackDefinition) -> Dict[str, Any]:
    """Generate the CloudFormation template for an additional stack.

    Sections the definition leaves unset are omitted rather than sent as
    null, which CloudFormation rejects.

    Args:
        stack_name: Logical key of the stack in the collection
        stack: Stack definition

    Returns:
        Template as a dictionary
    """
    template: Dict[str, Any] = {
        "AWSTemplateFormatVersion": TEMPLATE_FORMAT_VERSION,
        "Description": stack.description or f"{stack_name} additional stack",
    }

    for section, attr in TEMPLATE_SECTIONS:
        value = getattr(stack, attr)
        if value is not None:
            template[section] = value

    return template


def template_body(template: Dict[str, Any]) -> str:
    """Serialize a template for the TemplateBody request field."""
    return json.dumps(template)
