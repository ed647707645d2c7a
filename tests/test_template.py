"""
Tests for additional stack template generation.
"""

import json

from additional_stacks.cloudformation.template import build_template, template_body
from additional_stacks.config import StackDefinition


class TestBuildTemplate:
    """Test build_template."""

    def test_minimal_stack(self) -> None:
        """Test a stack with no sections only carries version and description."""
        template = build_template("db", StackDefinition())

        assert template == {
            "AWSTemplateFormatVersion": "2010-09-09",
            "Description": "db additional stack",
        }

    def test_sections_passed_through(self) -> None:
        """Test configured sections are copied verbatim."""
        data = {
            "Description": "Database tables",
            "Conditions": {"IsProd": {"Fn::Equals": [{"Ref": "Stage"}, "prod"]}},
            "Mappings": {"Sizes": {"dev": {"Capacity": 1}}},
            "Metadata": {"Owner": "data"},
            "Outputs": {"TableName": {"Value": {"Ref": "Table"}}},
            "Parameters": {"Stage": {"Type": "String", "Default": "dev"}},
            "Resources": {"Table": {"Type": "AWS::DynamoDB::Table"}},
            "Transform": "AWS::Serverless-2016-10-31",
        }

        template = build_template("db", StackDefinition.from_dict(data))

        for key, value in data.items():
            assert template[key] == value

    def test_absent_sections_omitted(self) -> None:
        """Test unset sections are left out instead of sent as null."""
        template = build_template(
            "queues", StackDefinition(resources={"Queue": {"Type": "AWS::SQS::Queue"}})
        )

        assert set(template) == {"AWSTemplateFormatVersion", "Description", "Resources"}
        assert None not in template.values()

    def test_empty_section_kept(self) -> None:
        """Test an explicitly empty section is still sent."""
        template = build_template("db", StackDefinition(outputs={}))
        assert template["Outputs"] == {}

    def test_empty_description_defaults(self) -> None:
        """Test an empty description falls back to the default one."""
        template = build_template("cache", StackDefinition(description=""))
        assert template["Description"] == "cache additional stack"

    def test_tags_and_names_not_in_template(self) -> None:
        """Test stack-level settings are not template sections."""
        template = build_template(
            "db", StackDefinition(stack_name="x", tags={"A": "b"}, deploy="After")
        )

        assert "Tags" not in template
        assert "StackName" not in template
        assert "Deploy" not in template


class TestTemplateBody:
    """Test template_body."""

    def test_serializes_to_json(self) -> None:
        """Test the wire representation is JSON of the template."""
        template = build_template("db", StackDefinition(resources={"T": {"Type": "X"}}))
        assert json.loads(template_body(template)) == template
