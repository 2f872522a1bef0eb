from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from recipe_steps.config import PipelineConfig


@dataclass
class StageResult:
    name: str = ""
    status: str = "success"
    outputs: Dict[str, Any] = field(default_factory=dict)
    details: Optional[str] = None


@dataclass
class PipelineContext:
    config: PipelineConfig
    workdir: Path = field(default_factory=Path.cwd)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("recipe_steps"))

    def stage(self, name: str, *, required: bool = True) -> Dict[str, Any]:
        return self.config.stage(name, required=required)

    def logging(self, name: str) -> Dict[str, Any]:
        return self.config.logging(name)

    def resolve(self, path: str | Path | None) -> Optional[Path]:
        """Resolve a config path against the working directory."""
        if path is None:
            return None
        p = Path(path)
        return p if p.is_absolute() else self.workdir / p

    def artifact(self, key: str, override: str | Path | None = None) -> Path:
        """Explicit override, else ``artifacts.<key>``; always resolved against workdir."""
        value = override or self.config.artifacts.get(key)
        if not value:
            raise KeyError(f"No path given and artifacts.{key} is not set in the pipeline config")
        return self.resolve(value)
