"""Pluggable, cached source of framework directory presets."""

import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from safepaths.domain.context_id import component_logger
from safepaths.domain.errors import SafePathsError, UnknownPreset
from safepaths.presets.tables import BUNDLED_PRESETS

PRESET_LOGGER = component_logger("presets")

PathMap = dict[str, str]
PresetProvider = Callable[[str], Mapping[str, str]]

SEPARATORS = "/\\"


def trim_base(base_path: str) -> str:
    """Strip trailing ``/`` and ``\\`` from a base directory."""
    return base_path.rstrip(SEPARATORS)


def build_path(base_path: str, suffix: str) -> str:
    """Join a trusted relative suffix onto a trimmed base directory."""
    suffix = suffix.lstrip(SEPARATORS)
    if not suffix:
        return base_path
    return f"{base_path}/{suffix}"


def table_provider(table: Mapping[str, str]) -> PresetProvider:
    """Turn a ``name -> suffix`` table into a provider of absolute paths."""
    frozen = dict(table)

    def provide(base_path: str) -> PathMap:
        base = trim_base(base_path)
        return {name: build_path(base, suffix) for name, suffix in frozen.items()}

    return provide


@dataclass(frozen=True)
class Preset:
    """A named provider of one framework's directory layout."""

    name: str
    provider: PresetProvider = field(compare=False)
    title: str = ""
    description: str = ""


class PresetLoader:
    """Registry of presets with a ``(name, base)`` result cache.

    Results are pure functions of their inputs, so cached entries are never
    invalidated except when a name is re-registered or ``clear_cache`` runs.
    """

    def __init__(self, presets: Optional[list[Preset]] = None) -> None:
        self._lock = threading.Lock()
        self._presets: dict[str, Preset] = {}
        self._cache: dict[tuple[str, str], Mapping[str, str]] = {}
        for preset in presets or []:
            self._presets[preset.name.lower()] = preset

    def register_preset(
        self,
        name: str,
        provider: PresetProvider,
        *,
        title: Optional[str] = None,
        description: str = "",
    ) -> None:
        """Install or replace the provider registered under ``name``."""
        key = name.lower()
        if not callable(provider):
            raise TypeError(f"Preset provider for '{name}' must be callable")
        preset = Preset(key, provider, title or name, description)
        with self._lock:
            self._presets[key] = preset
            for cache_key in [k for k in self._cache if k[0] == key]:
                del self._cache[cache_key]
        PRESET_LOGGER.info(
            "Preset registered", extra={"event": "preset_registered", "preset": key}
        )

    def has_preset(self, name: str) -> bool:
        with self._lock:
            return name.lower() in self._presets

    def list_presets(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._presets)

    def preset_info(self) -> dict[str, dict[str, str]]:
        """Return ``{name: {"title": ..., "description": ...}}`` for every preset."""
        with self._lock:
            presets = list(self._presets.values())
        return {
            preset.name: {"title": preset.title, "description": preset.description}
            for preset in sorted(presets, key=lambda item: item.name)
        }

    def load_preset(self, name: str, base_path: str) -> PathMap:
        """Return the preset's map for ``base_path``; UnknownPreset if missing."""
        key = name.lower()
        base = trim_base(base_path)
        cache_key = (key, base)

        with self._lock:
            preset = self._presets.get(key)
            cached = self._cache.get(cache_key)
            available = list(self._presets)
        if preset is None:
            raise UnknownPreset(name, available)

        if cached is not None:
            PRESET_LOGGER.debug(
                "Preset served from cache",
                extra={"event": "preset_cache_hit", "preset": key, "base_path": base},
            )
            return dict(cached)

        produced = preset.provider(base)
        if not isinstance(produced, Mapping):
            raise SafePathsError(
                f"Preset '{key}' provider returned {type(produced).__name__}, "
                "expected a mapping"
            )
        snapshot = MappingProxyType(dict(produced))
        # Concurrent loads compute equal maps, so the last write is harmless.
        with self._lock:
            self._cache[cache_key] = snapshot
        PRESET_LOGGER.debug(
            "Preset loaded",
            extra={
                "event": "preset_loaded",
                "preset": key,
                "base_path": base,
                "entries": len(snapshot),
            },
        )
        return dict(snapshot)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def cache_info(self) -> dict:
        """Number of cached results and their ``name:base`` keys."""
        with self._lock:
            keys = [f"{name}:{base}" for name, base in self._cache]
        return {"loaded_presets": len(keys), "preset_keys": keys}


def default_loader() -> PresetLoader:
    """Return a fresh loader holding the bundled framework presets."""
    return PresetLoader(
        [
            Preset(name, table_provider(table), title, description)
            for name, (title, description, table) in BUNDLED_PRESETS.items()
        ]
    )
