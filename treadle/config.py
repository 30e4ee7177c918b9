"""
Configuration models

Pydantic models for limits and agent options, loadable from YAML or JSON.

Example ``treadle.yaml``::

    limits:
      use_defaults: true
      rules:
        - key: input_tokens
          max_value: 50000
        - key: "tool_calls_error_consecutive:"
          mode: prefix
          max_value: 2
    agent:
      behavior: You are a helpful travel assistant.
      streaming: true
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError
from .execution import Limit, MatchMode, default_limits


class LimitRule(BaseModel):
    """One limit rule"""
    key: str = Field(..., min_length=1, description="Counter key, or key prefix in prefix mode")
    max_value: int = Field(..., ge=0, description="Largest allowed value (inclusive)")
    mode: MatchMode = Field(MatchMode.EXACT, description="exact or prefix")

    def to_limit(self) -> Limit:
        return Limit(self.mode, self.key, self.max_value)


class LimitConfig(BaseModel):
    """Limit configuration"""
    use_defaults: bool = Field(True, description="Start from the default limit set")
    rules: list[LimitRule] = Field(default_factory=list, description="Extra or overriding rules")

    def build(self) -> list[Limit]:
        """Defaults first (unless disabled); a rule with the same mode and key replaces the default."""
        limits = default_limits() if self.use_defaults else []
        for rule in self.rules:
            limit = rule.to_limit()
            limits = [lim for lim in limits if (lim.mode, lim.key) != (limit.mode, limit.key)]
            limits.append(limit)
        return limits


class AgentConfig(BaseModel):
    """ReAct agent options"""
    behavior: str = Field("", description="Behavior and context for the system prompt")
    critical_rules: str = Field("", description="Rules the agent must follow")
    thinking: str | None = Field(None, description="Enable a thinking section with this guidance")
    streaming: bool = Field(False, description="Use streaming model calls when supported")
    observation_prefix: str = Field("Observation:\n", description="Prefix of tool observations")
    error_prefix: str = Field("Error:\n", description="Prefix of toolchain errors")


class TreadleConfig(BaseModel):
    """Complete treadle configuration"""
    version: str = Field("1.0", description="Config version")
    limits: LimitConfig = Field(default_factory=LimitConfig, description="Limits")
    agent: AgentConfig = Field(default_factory=AgentConfig, description="Agent options")

    def build_limits(self) -> list[Limit]:
        return self.limits.build()

    def apply_to(self, agent: Any) -> Any:
        """Copy agent options onto a ReactAgent."""
        opts = self.agent
        agent.with_behavior(opts.behavior).with_critical_rules(opts.critical_rules)
        agent.with_streaming(opts.streaming)
        if opts.thinking is not None:
            agent.with_thinking(opts.thinking)
        agent.observation_prefix = opts.observation_prefix
        agent.error_prefix = opts.error_prefix
        return agent


def from_dict(data: dict[str, Any]) -> TreadleConfig:
    try:
        return TreadleConfig.model_validate(data or {})
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}", e) from e


def load_config(path: str | Path) -> TreadleConfig:
    """Load a YAML (``.yaml``/``.yml``) or JSON (``.json``) config file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        elif suffix == ".json":
            data = json.loads(text)
        else:
            raise ConfigError(f"unsupported config format: {suffix}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot parse {path}: {e}", e) from e
    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return from_dict(data or {})
