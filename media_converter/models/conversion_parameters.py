"""
Immutable description of a single requested conversion.
"""
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class ConversionParameters:
    """
    Source, destination and encoder options for one conversion job.

    The options mapping is copied on construction and exposed read-only, so a
    parameter set handed to the queue cannot be changed behind its back.
    Recognised option keys are listed in ffmpeg_utils.build_conversion_command.
    """
    source: str
    destination: str
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, 'source', str(self.source))
        object.__setattr__(self, 'destination', str(self.destination))
        object.__setattr__(self, 'options', MappingProxyType(dict(self.options or {})))

    @property
    def source_name(self) -> str:
        return os.path.basename(self.source)

    @property
    def destination_name(self) -> str:
        return os.path.basename(self.destination)

    def option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    def __str__(self) -> str:
        return f"ConversionParameters({self.source_name} -> {self.destination_name})"
