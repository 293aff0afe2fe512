"""Config loader: YAML serialization and deserialization for ReconConfig.

Provides round-trip save/load so per-program settings (manual commission
rate, extra header aliases) can be reviewed and version-controlled as
human-readable YAML files.
"""

from pathlib import Path

import yaml

from .config import ReconConfig


def save_config(config: ReconConfig, path: str | Path) -> None:
    """Serialize a ReconConfig to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.to_dict()
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def load_config(path: str | Path) -> ReconConfig:
    """Deserialize a ReconConfig from a YAML file.

    An empty file loads as the defaults.

    Raises:
        ValueError: If the file is not valid YAML or fails validation.
    """
    path = Path(path)
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"Malformed YAML: {exc}") from exc
    return ReconConfig.from_dict(data)
