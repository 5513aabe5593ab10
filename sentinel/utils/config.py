"""
sentinel.utils.config — Centralized configuration with YAML loading and defaults.
"""

from __future__ import annotations

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class AgentConfig:
    transport: str = "http"  # "http" (agent gateway) or "ollama" (local model)
    base_url: str = "http://localhost:8000/api"
    api_key: Optional[str] = None
    worker_agent_id: str = "69858e5be5d25ce3f598caf6"
    sentinel_agent_id: str = "69858e7f07ec48e3dc90a21c"
    timeout_seconds: float = 60.0


@dataclass
class LLMConfig:
    """Only used when agents.transport == "ollama"."""

    base_url: str = "http://localhost:11434"
    model: str = "llama3.2:3b"
    temperature: float = 0.1
    num_predict: int = 1024  # plans and assessments are longer than chat replies
    num_ctx: int = 4096
    timeout_seconds: int = 120


@dataclass
class AuditConfig:
    enabled: bool = True


@dataclass
class ObservabilityConfig:
    log_dir: str = "logs"
    log_file: str = "sentinel.jsonl"
    audit_file: str = "verdict_audit.jsonl"
    trace_dir: str = "logs/traces"

    @property
    def audit_path(self) -> str:
        return str(Path(self.log_dir) / self.audit_file)


@dataclass
class SentinelConfig:
    agents: AgentConfig = field(default_factory=AgentConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)
    debug: bool = False

    @classmethod
    def load(cls, config_path: str = "config.yaml") -> "SentinelConfig":
        """Load configuration from YAML file, falling back to defaults."""
        config = cls()
        path = Path(config_path)
        if path.exists():
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            config = cls._merge(config, data)
        return cls._apply_env(config)

    @classmethod
    def _merge(cls, config: "SentinelConfig", data: dict) -> "SentinelConfig":
        """Merge dict data into config dataclass recursively."""
        for section_name, section_data in data.items():
            if hasattr(config, section_name):
                section = getattr(config, section_name)
                if isinstance(section_data, dict) and hasattr(
                    section, "__dataclass_fields__"
                ):
                    for key, value in section_data.items():
                        if hasattr(section, key):
                            setattr(section, key, value)
                else:
                    setattr(config, section_name, section_data)
        return config

    @staticmethod
    def _apply_env(config: "SentinelConfig") -> "SentinelConfig":
        """Secrets and endpoints may come from the environment instead of YAML."""
        base_url = os.environ.get("SENTINEL_AGENT_BASE_URL")
        if base_url:
            config.agents.base_url = base_url
        api_key = os.environ.get("SENTINEL_AGENT_API_KEY")
        if api_key:
            config.agents.api_key = api_key
        return config

    def ensure_dirs(self):
        """Create all required data directories."""
        for d in (self.observability.log_dir, self.observability.trace_dir):
            Path(d).mkdir(parents=True, exist_ok=True)
