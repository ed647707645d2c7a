"""Configuration file loading and validation."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jsonschema
import yaml

from ..errors import ConfigurationError
from . import DEFAULT_CONCURRENCY, DEFAULT_POLL_INTERVAL, DEFAULT_REGION, DEFAULT_STAGE
from . import Settings, make_collection

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILES = ["additional-stacks.yml", "additional-stacks.yaml", "serverless.yml"]

STACK_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": {
        "type": ["object", "null"],
        "properties": {
            "StackName": {"type": "string"},
            "Description": {"type": ["string", "object"]},
            "Conditions": {"type": "object"},
            "Mappings": {"type": "object"},
            "Metadata": {"type": "object"},
            "Outputs": {"type": "object"},
            "Parameters": {"type": "object"},
            "Resources": {"type": "object"},
            "Transform": {"type": ["string", "array", "object"]},
            "Tags": {
                "type": "object",
                "additionalProperties": {"type": ["string", "number", "boolean", "object"]},
            },
            "Deploy": {
                "type": "string",
                "pattern": "^(?i:before|after)$",
            },
        },
        "additionalProperties": False,
    },
}


class CloudFormationYAMLLoader(yaml.SafeLoader):
    """YAML loader that can handle CloudFormation intrinsic functions."""

    pass


def cfn_tag_constructor(loader, tag_suffix, node):
    """Construct a CloudFormation short-form tag as its long form."""
    key = "Ref" if tag_suffix == "Ref" else f"Fn::{tag_suffix}"
    if isinstance(node, yaml.ScalarNode):
        value = loader.construct_scalar(node)
        if tag_suffix == "GetAtt" and isinstance(value, str):
            value = value.split(".", 1)
        return {key: value}
    elif isinstance(node, yaml.SequenceNode):
        return {key: loader.construct_sequence(node, deep=True)}
    elif isinstance(node, yaml.MappingNode):
        return {key: loader.construct_mapping(node, deep=True)}
    raise yaml.constructor.ConstructorError(
        None, None,
        f"could not determine a constructor for the tag '!{tag_suffix}'",
        node.start_mark)


cfn_tags = [
    "Ref", "GetAtt", "GetAZs", "ImportValue", "Join", "Select",
    "Split", "Sub", "Transform", "Base64", "Cidr", "FindInMap",
    "Condition", "Equals", "If", "Not", "And", "Or",
]

for tag in cfn_tags:
    CloudFormationYAMLLoader.add_constructor(
        f"!{tag}",
        lambda loader, node, tag=tag: cfn_tag_constructor(loader, tag, node)
    )


def find_config_file(directory: Optional[Path] = None) -> Path:
    """Find the first known configuration file in a directory."""
    directory = directory or Path.cwd()
    for name in DEFAULT_CONFIG_FILES:
        candidate = directory / name
        if candidate.exists():
            return candidate
    raise ConfigurationError(
        f"No configuration file found in {directory} "
        f"(looked for {', '.join(DEFAULT_CONFIG_FILES)})"
    )


def validate_stacks(stacks: Dict[str, Any]) -> List[str]:
    """Validate the additionalStacks mapping.

    Returns:
        List of error messages, empty when valid
    """
    errors = []
    validator = jsonschema.Draft7Validator(STACK_SCHEMA)
    for error in sorted(validator.iter_errors(stacks), key=lambda e: list(e.absolute_path)):
        path = " -> ".join(str(x) for x in error.absolute_path) or "additionalStacks"
        errors.append(f"{path}: {error.message}")
    return errors


def _number(data: Dict[str, Any], key: str, default: Any, cast) -> Any:
    value = data.get(key)
    if value is None:
        return default
    try:
        number = cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from e
    if number <= 0:
        raise ConfigurationError(f"{key} must be greater than 0, got {value!r}")
    return number


def _service_name(data: Dict[str, Any]) -> Optional[str]:
    service = data.get("service")
    if isinstance(service, dict):
        return service.get("name")
    return service


def settings_from_dict(data: Dict[str, Any]) -> Settings:
    """Create settings from a parsed configuration document."""
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a mapping")

    service = _service_name(data)
    if not service:
        raise ConfigurationError("Configuration is missing the service name")

    provider = data.get("provider") or {}
    custom = data.get("custom") or {}
    stacks = data.get("additionalStacks")
    if stacks is None:
        stacks = custom.get("additionalStacks") or {}

    errors = validate_stacks(stacks)
    if errors:
        raise ConfigurationError(
            "Invalid additional stacks configuration:\n  " + "\n  ".join(errors)
        )

    collection = make_collection(stacks)
    for key, stack in collection.items():
        logger.debug(f"Stack {key}: {', '.join(stack.to_dict()) or 'empty'}")

    return Settings(
        service=service,
        stage=data.get("stage") or provider.get("stage") or DEFAULT_STAGE,
        region=data.get("region") or provider.get("region") or DEFAULT_REGION,
        profile=data.get("profile") or provider.get("profile"),
        concurrency=_number(data, "concurrency", DEFAULT_CONCURRENCY, int),
        poll_interval=_number(data, "pollInterval", DEFAULT_POLL_INTERVAL, float),
        stacks=collection,
    )


def load_settings(config_path: Optional[Union[str, Path]] = None) -> Settings:
    """Load settings from a YAML configuration file.

    Args:
        config_path: Path to the file (searched in the working directory if not provided)

    Returns:
        Parsed settings with the stack collection
    """
    path = Path(config_path) if config_path else find_config_file()
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    logger.info(f"Loading configuration: {path}")
    with open(path, "r") as f:
        try:
            data = yaml.load(f, Loader=CloudFormationYAMLLoader)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse {path}: {e}") from e

    return settings_from_dict(data or {})
