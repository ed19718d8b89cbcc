"""Search targets: which (region, query) pairs the collector visits."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class Target(BaseModel):
    """One search to run: a region code (ZIP) and a free-text query."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    region: str = Field(validation_alias=AliasChoices("region", "zip"))
    query: str


def load_targets(path: Path) -> list[Target]:
    """Load the ordered target list from JSON or YAML.

    Expected shape: ``[{"zip": "94107", "query": "Honda Civic"}, ...]``.
    ``region`` is accepted in place of ``zip``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a list of valid targets.
    """
    if not path.exists():
        raise FileNotFoundError(f"Targets file not found: {path}")

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text) or []
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid targets YAML {path}: {e}") from e
    else:
        data = json.loads(text)

    if not isinstance(data, list):
        raise ValueError(f"Targets file must contain a list: {path}")

    targets = [Target.model_validate(item) for item in data]
    logger.info("Loaded %d targets from %s", len(targets), path)
    return targets
