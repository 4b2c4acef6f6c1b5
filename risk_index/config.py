"""
Risk Index Engine - Configuration.

============================================================
PURPOSE
============================================================
Engine settings that are not part of any formula document.

Sources, in increasing precedence:
1. Dataclass defaults
2. YAML file (``RiskIndexConfig.from_yaml``)
3. Environment / .env (``RiskIndexConfig.from_env``)

============================================================
ENVIRONMENT VARIABLES
============================================================
RISK_INDEX_DEFAULT_MAX_SCORE
RISK_INDEX_BATCH_MAX_WORKERS
RISK_INDEX_BATCH_RECORD_LIMIT
RISK_INDEX_COMPATIBILITY_SAMPLE_SIZE
RISK_INDEX_LOG_COMPONENT_FAULTS
RISK_INDEX_FORMULAS_DIR

============================================================
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv


ENV_PREFIX = "RISK_INDEX_"


@dataclass(frozen=True)
class RiskIndexConfig:
    """
    Master configuration for the Risk Index Engine.
    """

    # Ceiling used when a formula declares no maxScore
    default_max_score: float = 100.0

    # Batch scoring
    batch_max_workers: int = 4
    batch_record_limit: int = 100_000     # callers must chunk larger batches

    # Rows scored by check_compatibility
    compatibility_sample_size: int = 5

    # Log absorbed component failures at WARNING
    log_component_faults: bool = True

    # Directory of formula JSON files for the repository / CLI
    formulas_dir: Optional[str] = None

    engine_version: str = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_max_score": self.default_max_score,
            "batch_max_workers": self.batch_max_workers,
            "batch_record_limit": self.batch_record_limit,
            "compatibility_sample_size": self.compatibility_sample_size,
            "log_component_faults": self.log_component_faults,
            "formulas_dir": self.formulas_dir,
            "engine_version": self.engine_version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiskIndexConfig":
        """Build from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "RiskIndexConfig":
        """
        Load configuration from a YAML file.

        The settings may sit at the top level or under a
        ``risk_index`` key.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if "risk_index" in data:
            data = data["risk_index"] or {}
        return cls.from_dict(data)

    def with_env_overrides(self, env: Optional[Dict[str, str]] = None) -> "RiskIndexConfig":
        """Return a copy with ``RISK_INDEX_*`` variables applied."""
        env = os.environ if env is None else env
        overrides: Dict[str, Any] = {}

        for f in fields(self):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            if f.type in (bool, "bool"):
                overrides[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
            elif f.type in (int, "int"):
                overrides[f.name] = int(raw)
            elif f.type in (float, "float"):
                overrides[f.name] = float(raw)
            else:
                overrides[f.name] = raw

        return replace(self, **overrides) if overrides else self

    @classmethod
    def from_env(cls) -> "RiskIndexConfig":
        """Load ``.env`` if present, then read ``RISK_INDEX_*`` variables."""
        load_dotenv()
        return cls().with_env_overrides()


# ============================================================
# DEFAULT CONFIGURATION
# ============================================================


def get_default_config() -> RiskIndexConfig:
    """Return the default Risk Index Engine configuration."""
    return RiskIndexConfig()


def load_config(path: Optional[Union[str, Path]] = None) -> RiskIndexConfig:
    """
    Load configuration from file (if given and present), then
    apply environment overrides.

    Args:
        path: Optional path to YAML config file

    Returns:
        RiskIndexConfig instance
    """
    load_dotenv()
    if path and Path(path).exists():
        config = RiskIndexConfig.from_yaml(path)
    else:
        config = get_default_config()
    return config.with_env_overrides()
