"""
Configuration management utilities.
"""

import yaml
import json
import logging
import jsonschema
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "experiment.yaml"
DEFAULT_SCHEMA_NAME = "experiment_schema.json"


class ConfigManager:
    """
    Loads, validates and merges experiment configurations.
    """

    def __init__(self, config_dir: Optional[str] = None, schema_dir: Optional[str] = None):
        self.config_dir = Path(config_dir) if config_dir else Path("config")
        self.schema_dir = Path(schema_dir) if schema_dir else self.config_dir / "schemas"

    def load_config(self, config_name: str, schema_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Load a configuration file (YAML or JSON).
        Optionally validate against a schema.

        Args:
            config_name: Name of config file (e.g. 'experiment.yaml')
            schema_name: Name of schema file (e.g. 'experiment_schema.json')

        Returns:
            Loaded configuration dictionary
        """
        config_path = self.config_dir / config_name

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            if config_path.suffix in (".yaml", ".yml"):
                config = yaml.safe_load(f)
            elif config_path.suffix == ".json":
                config = json.load(f)
            else:
                raise ValueError(f"Unsupported configuration format: {config_path.suffix}")

        if schema_name:
            self.validate_config(config, schema_name)

        return config

    def validate_config(self, config: Dict[str, Any], schema_name: str) -> None:
        """
        Validate configuration against a JSON schema.

        Args:
            config: Configuration dictionary
            schema_name: Name of schema file
        """
        schema_path = self.schema_dir / schema_name

        if not schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")

        with open(schema_path, "r") as f:
            schema = json.load(f)

        try:
            jsonschema.validate(instance=config, schema=schema)
        except jsonschema.exceptions.ValidationError as e:
            path_str = " -> ".join(str(p) for p in e.path) if e.path else "root"
            error_msg = f"Configuration validation failed at '{path_str}': {e.message}"
            logger.error(error_msg)
            raise ValueError(error_msg) from e

        logger.info(f"Configuration successfully validated against {schema_name}")

    def merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two configurations; values in ``override`` win.
        """
        merged = base.copy()
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self.merge_configs(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get_value(self, config: Dict[str, Any], path: str, default: Any = None) -> Any:
        """
        Get a value from configuration using dot notation.

        Args:
            config: Configuration dictionary
            path: Dot-separated path (e.g., 'search.window.k_folds')
            default: Default value if path not found

        Returns:
            Value at path or default
        """
        current = config
        for key in path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    def set_value(self, config: Dict[str, Any], path: str, value: Any) -> None:
        """
        Set a value in configuration using dot notation.
        Creates intermediate dictionaries if they don't exist.
        """
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def load_experiment_config(
        self,
        config_name: str = DEFAULT_CONFIG_NAME,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ExperimentConfig":
        """
        Load, merge overrides into, and validate an experiment configuration.

        Args:
            config_name: Name of the YAML file under ``config_dir``
            overrides: Nested dictionary merged over the file contents

        Returns:
            ExperimentConfig
        """
        config = self.load_config(config_name)
        if overrides:
            config = self.merge_configs(config, overrides)
        self.validate_config(config, DEFAULT_SCHEMA_NAME)
        return ExperimentConfig.from_dict(config)


def _candidate_range(spec: Dict[str, Any]) -> List[float]:
    """Expand a {start, stop, step} block into an inclusive candidate list."""
    start, stop, step = spec["start"], spec["stop"], spec["step"]
    if all(isinstance(v, int) for v in (start, stop, step)):
        return list(range(start, stop + 1, step))
    # Float grids: round away accumulation error so 0.3 stays 0.3
    count = int(np.floor((stop - start) / step + 1e-9)) + 1
    return [round(start + i * step, 10) for i in range(count)]


@dataclass
class ExperimentConfig:
    """Typed view of a validated experiment configuration."""
    n_samples: int = 1250
    noise_variance: float = 1.0
    intercept: float = 2.0
    slope: float = 3.0
    error_sd: float = 1.0
    latent: str = "random_walk"
    random_state: Optional[int] = 42
    test_fraction: float = 0.2
    window_candidates: List[int] = field(default_factory=lambda: list(range(2, 121, 2)))
    k_folds: int = 10
    shuffle_folds: bool = False
    n_slices: int = 5
    slice_size: int = 200
    slice_train_size: int = 150
    alpha_candidates: List[float] = field(
        default_factory=lambda: [round(0.02 * i, 10) for i in range(1, 50)]
    )
    window_selection: str = "plateau"
    window_tolerance: float = 0.01
    alpha_selection: str = "minimum"
    max_workers: int = 1

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "ExperimentConfig":
        """Build from the nested mapping described by experiment_schema.json."""
        data = config.get("data", {})
        window = config.get("search", {}).get("window", {})
        alpha = config.get("search", {}).get("alpha", {})
        defaults = cls()

        return cls(
            n_samples=data.get("n_samples", defaults.n_samples),
            noise_variance=data.get("noise_variance", defaults.noise_variance),
            intercept=data.get("intercept", defaults.intercept),
            slope=data.get("slope", defaults.slope),
            error_sd=data.get("error_sd", defaults.error_sd),
            latent=data.get("latent", defaults.latent),
            random_state=data.get("random_state", defaults.random_state),
            test_fraction=data.get("test_fraction", defaults.test_fraction),
            window_candidates=(
                _candidate_range(window["candidates"])
                if "candidates" in window else defaults.window_candidates
            ),
            k_folds=window.get("k_folds", defaults.k_folds),
            shuffle_folds=window.get("shuffle", defaults.shuffle_folds),
            window_selection=window.get("selection", defaults.window_selection),
            window_tolerance=window.get("tolerance", defaults.window_tolerance),
            alpha_candidates=(
                _candidate_range(alpha["candidates"])
                if "candidates" in alpha else defaults.alpha_candidates
            ),
            n_slices=alpha.get("slices", {}).get("count", defaults.n_slices),
            slice_size=alpha.get("slices", {}).get("size", defaults.slice_size),
            slice_train_size=alpha.get("slices", {}).get("train_size", defaults.slice_train_size),
            alpha_selection=alpha.get("selection", defaults.alpha_selection),
            max_workers=config.get("search", {}).get("max_workers", defaults.max_workers),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a flat dictionary for logging."""
        return {
            "n_samples": self.n_samples,
            "noise_variance": self.noise_variance,
            "intercept": self.intercept,
            "slope": self.slope,
            "error_sd": self.error_sd,
            "latent": self.latent,
            "random_state": self.random_state,
            "test_fraction": self.test_fraction,
            "window_candidates": self.window_candidates,
            "k_folds": self.k_folds,
            "shuffle_folds": self.shuffle_folds,
            "n_slices": self.n_slices,
            "slice_size": self.slice_size,
            "slice_train_size": self.slice_train_size,
            "alpha_candidates": self.alpha_candidates,
            "window_selection": self.window_selection,
            "window_tolerance": self.window_tolerance,
            "alpha_selection": self.alpha_selection,
            "max_workers": self.max_workers,
        }
