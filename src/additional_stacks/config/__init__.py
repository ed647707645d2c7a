"""
Configuration management for additional stacks.

Holds the stack definitions, the per-invocation operation context and the
service-level settings they are resolved against.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..errors import ConfigurationError

DEFAULT_CONCURRENCY = 3
DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_REGION = "us-east-1"
DEFAULT_STAGE = "dev"


class Purpose(Enum):
    """What an invocation intends to do with the selected stacks."""

    DEPLOY = "deploy"
    REMOVE = "remove"
    DESCRIBE = "describe"


class DeployPhase(Enum):
    """When a stack is deployed relative to the primary deployment."""

    BEFORE = "before"
    AFTER = "after"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DeployPhase":
        """Parse a ``Deploy`` value, defaulting to ``BEFORE``."""
        if value is None:
            return cls.BEFORE
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid Deploy value: {value} (expected Before or After)"
            ) from e


@dataclass(frozen=True)
class StackDefinition:
    """One additional stack as written in the configuration file."""

    stack_name: Optional[str] = None
    description: Optional[str] = None
    conditions: Optional[Dict[str, Any]] = None
    mappings: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    outputs: Optional[Dict[str, Any]] = None
    parameters: Optional[Dict[str, Any]] = None
    resources: Optional[Dict[str, Any]] = None
    transform: Optional[Any] = None
    tags: Optional[Dict[str, Any]] = None
    deploy: Optional[str] = None

    # Configuration key -> attribute name
    FIELDS = {
        "StackName": "stack_name",
        "Description": "description",
        "Conditions": "conditions",
        "Mappings": "mappings",
        "Metadata": "metadata",
        "Outputs": "outputs",
        "Parameters": "parameters",
        "Resources": "resources",
        "Transform": "transform",
        "Tags": "tags",
        "Deploy": "deploy",
    }

    @property
    def phase(self) -> DeployPhase:
        return DeployPhase.parse(self.deploy)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "StackDefinition":
        """Create a definition from its configuration mapping."""
        data = data or {}
        return cls(
            **{attr: data[key] for key, attr in cls.FIELDS.items() if key in data}
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the configuration mapping, skipping unset fields."""
        return {
            key: getattr(self, attr)
            for key, attr in self.FIELDS.items()
            if getattr(self, attr) is not None
        }


StackCollection = Mapping[str, StackDefinition]


def make_collection(stacks: Mapping[str, Any]) -> StackCollection:
    """Build a read-only stack collection from raw or parsed definitions."""
    return MappingProxyType(
        {
            key: value
            if isinstance(value, StackDefinition)
            else StackDefinition.from_dict(value)
            for key, value in stacks.items()
        }
    )


@dataclass(frozen=True)
class OperationContext:
    """Parameters of a single deploy/remove/describe invocation."""

    purpose: Purpose = Purpose.DEPLOY
    stack: Optional[str] = None
    all: bool = False
    skip: bool = False
    phase: Optional[DeployPhase] = None
    stage: Optional[str] = None
    region: Optional[str] = None
    concurrency: int = DEFAULT_CONCURRENCY


@dataclass
class Settings:
    """Service-level settings loaded from the configuration file."""

    service: str
    stage: str = DEFAULT_STAGE
    region: str = DEFAULT_REGION
    profile: Optional[str] = None
    concurrency: int = DEFAULT_CONCURRENCY
    poll_interval: float = DEFAULT_POLL_INTERVAL
    stacks: StackCollection = field(default_factory=lambda: make_collection({}))

    # Stack naming pattern of the primary deployment
    stack_name_pattern: str = "{service}-{stage}"

    def get_stack_name(self, stage: Optional[str] = None) -> str:
        """Get the primary deployment's stack name for a stage."""
        return self.stack_name_pattern.format(
            service=self.service, stage=stage or self.stage
        )

    def context(self, purpose: Purpose, **kwargs: Any) -> OperationContext:
        """Build an operation context, filling unset values from settings."""
        kwargs.setdefault("stage", self.stage)
        kwargs.setdefault("region", self.region)
        kwargs.setdefault("concurrency", self.concurrency)
        return OperationContext(purpose=purpose, **kwargs)


from .loader import load_settings  # noqa: E402

__all__ = [
    "DEFAULT_CONCURRENCY",
    "DEFAULT_POLL_INTERVAL",
    "DeployPhase",
    "OperationContext",
    "Purpose",
    "Settings",
    "StackCollection",
    "StackDefinition",
    "load_settings",
    "make_collection",
]
