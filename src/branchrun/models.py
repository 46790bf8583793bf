"""Base Pydantic models for tree entities and settings.

Tree entities are owned by the Tree collaborator and annotated in place by
the execution core, so unlike declarative schema models they stay mutable.
Assignments are still validated to keep recorded results well-typed.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeModel(BaseModel):
    """Base mutable model for branches, steps, and their parts.

    Design principles enforced by this model:
        - Validated mutation: the core annotates results on the models,
          every assignment is checked against the declared types.
        - Strict schema validation: unknown fields are rejected to avoid
          silent typos in trees built by hand or by tooling.
        - Runtime objects: payload callables and faults are allowed as
          field values.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Settings are resolved from the environment once and never change
    during a run. Unrelated environment variables are ignored.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
