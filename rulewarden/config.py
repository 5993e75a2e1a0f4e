"""Audit and remediation settings.

Defaults match the thresholds the engine was tuned with; every value can be
overridden through RULEWARDEN_* environment variables (a .env file is loaded
on package import).
"""

import os

from pydantic import BaseModel, Field

_ENV_PREFIX = "RULEWARDEN_"


class AuditConfig(BaseModel):
    """Tunable thresholds for redundancy detection and remediation."""

    report_threshold: float = Field(
        default=0.6, ge=0.0, le=1.0,
        description="Redundancy is reported when similarity is strictly above this",
    )
    merge_threshold: float = Field(
        default=0.6, ge=0.0, le=1.0,
        description=(
            "Minimum similarity for a pair to be considered for auto-merge; "
            "pairs at or above it are always reported"
        ),
    )
    line_overlap_threshold: float = Field(
        default=0.6, ge=0.0, le=1.0,
        description="Minimum line overlap required to corroborate an auto-merge",
    )
    near_duplicate_threshold: float = Field(
        default=0.8, ge=0.0, le=1.0,
        description="Similarity at which a pair is flagged as a near-certain duplicate",
    )
    min_line_length: int = Field(
        default=10, ge=0,
        description="Lines this long or shorter are ignored by the line-overlap measure",
    )
    max_tokens: int = Field(
        default=1500, gt=0,
        description="Documents estimated above this many tokens are split",
    )
    split: bool = Field(default=True, description="Plan Split actions for oversized documents")

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, **overrides: object) -> "AuditConfig":
        """Build a config from RULEWARDEN_* environment variables.

        Args:
            **overrides: Explicit values that win over the environment.

        Returns:
            Validated AuditConfig.

        Raises:
            ValueError: If an environment variable cannot be converted.
        """
        values: dict[str, object] = {}
        for name, info in cls.model_fields.items():
            env_name = f"{_ENV_PREFIX}{name.upper()}"
            raw = os.getenv(env_name)
            if raw is None or raw.strip() == "":
                continue
            raw = raw.strip()
            try:
                if info.annotation is bool:
                    values[name] = raw.lower() in ("1", "true", "yes", "on")
                elif info.annotation is int:
                    values[name] = int(raw)
                else:
                    values[name] = float(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {env_name}: {raw!r}") from e

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
