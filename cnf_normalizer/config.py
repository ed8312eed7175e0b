# cnf_normalizer/config.py
import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

DEFAULT_ITERATION_FACTOR = 4


class NormalizerConfigError(Exception):
    """Invalid normalizer configuration."""
    pass


@dataclass
class NormalizerConfig:
    """
    Options for one normalization run.

    keep_start_epsilon: keep ``start → ε`` when the start symbol is nullable
        (a fresh start symbol is introduced if the old one occurs in a body).
        Off by default: the empty string is dropped from the language.
    iteration_factor: a fixpoint loop may run at most
        ``iteration_factor * (symbols + productions + 1)`` rounds.
    verbose: print every intermediate grammar (CLI only).
    log_level: level name for the ``cnf_normalizer`` logger (CLI only).
    """
    keep_start_epsilon: bool = False
    iteration_factor: int = DEFAULT_ITERATION_FACTOR
    verbose: bool = True
    log_level: str = "WARNING"

    def __post_init__(self):
        if not isinstance(self.iteration_factor, int) or self.iteration_factor < 1:
            raise NormalizerConfigError(f"iteration_factor must be a positive integer, got {self.iteration_factor!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NormalizerConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise NormalizerConfigError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "NormalizerConfig":
        path = Path(path).expanduser()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise NormalizerConfigError(f"Failed to load config {path}: {e}") from e
        if not isinstance(data, dict):
            raise NormalizerConfigError(f"Config {path} must hold a JSON object")
        return cls.from_dict(data)

    def save(self, path: Union[str, Path]) -> None:
        Path(path).expanduser().write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")
