"""Settings from the environment: decoder choice, subject prefix, logging."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any

from eventroute.events.decoder import Decoder, decoder_for

_TRUE = {"1", "true", "yes", "on"}


def load_from_env(prefix: str = "EVENTROUTE_", **defaults: Any) -> dict[str, Any]:
    """Load from os.environ with prefix and defaults. EVENTROUTE_LOG_LEVEL -> {"log_level": ...}."""
    result = dict(defaults)
    for key, value in os.environ.items():
        if key.startswith(prefix):
            name = key[len(prefix):].lower()
            result[name] = value
    return result


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE


@dataclass(frozen=True)
class Settings:
    decoder: str = "json"
    strict: bool = False
    subject_prefix: str = ""
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, prefix: str = "EVENTROUTE_", **overrides: Any) -> Settings:
        """Environment first, then explicit overrides. Unknown variables with the prefix are ignored."""
        raw = load_from_env(prefix)
        raw.update(overrides)
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in raw.items() if k in known}
        for name in ("strict", "log_json"):
            if name in values:
                values[name] = _flag(values[name])
        if "log_level" in values:
            values["log_level"] = str(values["log_level"]).upper()
        return cls(**values)

    def build_decoder(self) -> Decoder:
        return decoder_for(self.decoder, strict=self.strict)
