"""Runtime settings of the execution core.

Settings are read from environment variables prefixed with `BRANCHRUN_`,
for example `BRANCHRUN_IDLE_INTERVAL=0.25`.
"""

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from branchrun.models import SettingsModel
from branchrun.names import canonicalize

ENV_PREFIX = 'BRANCHRUN_'


class RunSettings(SettingsModel):
    """Tunable behaviour of an execution instance."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        frozen=True,
        extra='ignore',
    )

    idle_interval: float = Field(
        default=1.0,
        ge=0,
        title='Idle interval',
        description=(
            'Seconds to wait before polling the Tree again when it has '
            'nothing runnable yet.'
        ),
    )

    browser_directive: str = Field(
        default='execute in browser',
        min_length=1,
        title='Browser directive',
        description=(
            'Step text dispatching the payload to the injected in-browser '
            'execution path instead of running it directly.'
        ),
    )

    @field_validator('browser_directive')
    @classmethod
    def _canonical_directive(cls, value: str) -> str:
        """Store the directive in canonical form."""
        return canonicalize(value)
