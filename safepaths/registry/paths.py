"""Named path registry with override merge and secure joining."""

import enum
import threading
from typing import Mapping, Optional

from safepaths.bootstrap.config import BASE_PATH_ENV, base_path_from_env
from safepaths.bootstrap.logging_setup import scrub_for_log
from safepaths.domain.context_id import component_logger
from safepaths.domain.errors import (
    ConfigurationError,
    NullByte,
    PathTraversal,
    PathValidationError,
    TraversalPattern,
    UnknownPathName,
)
from safepaths.domain.policy import SanitizationPolicy
from safepaths.domain.sanitizer import SEPARATOR, PathSanitizer, normalize
from safepaths.presets.loader import (
    PathMap,
    PresetLoader,
    build_path,
    default_loader,
    trim_base,
)

REGISTRY_LOGGER = component_logger("registry")

DEFAULT_SUFFIXES = {
    "base": "",
    "config": "config",
    "src": "src",
    "public": "public",
    "templates": "templates",
    "var": "var",
    "cache": "var/cache",
    "logs": "var/logs",
    "storage": "var/storage",
    "tests": "tests",
    "vendor": "vendor",
    "assets": "public/assets",
    "uploads": "public/uploads",
}

_REGISTRATION_PATTERNS = ("../", "..\\", "%2e%2e", "%2f", "%5c")
_UNSET = object()


class MergeStrategy(enum.Enum):
    """Which side wins when a preset and the current map share a name."""

    PRESET_WINS = "preset_wins"
    EXISTING_WINS = "existing_wins"


def merge_paths(
    current: Mapping[str, str],
    preset_paths: Mapping[str, str],
    strategy: MergeStrategy = MergeStrategy.PRESET_WINS,
) -> PathMap:
    """Merge preset entries into ``current``; names absent on one side survive."""
    if strategy is MergeStrategy.EXISTING_WINS:
        return {**preset_paths, **current}
    return {**current, **preset_paths}


def check_registration_path(raw_path: str) -> None:
    """Reject null bytes and traversal in a path passed to ``set``.

    Registered paths may be absolute, hidden or carry any extension; only the
    escape vectors are checked.
    """
    if "\x00" in raw_path:
        raise NullByte(raw_path)
    lowered = raw_path.lower()
    for pattern in _REGISTRATION_PATTERNS:
        if pattern in lowered:
            raise TraversalPattern(raw_path, pattern)
    decoded = normalize(raw_path)
    if "\x00" in decoded:
        raise NullByte(raw_path, "revealed by decoding")
    if ".." in decoded.split(SEPARATOR):
        raise PathTraversal(raw_path)


class PathRegistry:
    """Map symbolic names to paths under one base directory.

    The map is built eagerly from the defaults plus ``overrides``. When
    ``preset`` is given it is loaded lazily on first use and merged on top;
    a failure there is logged and the registry keeps the paths it already
    has. Use :meth:`with_preset` for fail-fast preset construction.
    """

    def __init__(
        self,
        base_directory: str,
        overrides: Optional[Mapping[str, str]] = None,
        *,
        policy: Optional[SanitizationPolicy] = None,
        loader: Optional[PresetLoader] = None,
        preset: Optional[str] = None,
        merge_strategy: MergeStrategy = MergeStrategy.PRESET_WINS,
    ) -> None:
        self._base = trim_base(base_directory)
        self._lock = threading.Lock()
        self._preset_lock = threading.Lock()
        self._sanitizer = PathSanitizer(policy)
        self._loader = loader
        self._merge_strategy = merge_strategy
        self._pending_preset = preset

        paths = {
            name: build_path(self._base, suffix)
            for name, suffix in DEFAULT_SUFFIXES.items()
        }
        paths.update(overrides or {})
        self._paths: PathMap = paths

    @classmethod
    def with_preset(
        cls,
        preset_name: str,
        base_directory: str,
        *,
        policy: Optional[SanitizationPolicy] = None,
        loader: Optional[PresetLoader] = None,
    ) -> "PathRegistry":
        """Build a registry whose overrides are the preset's map."""
        loader = loader or default_loader()
        preset_paths = loader.load_preset(preset_name, base_directory)
        return cls(base_directory, preset_paths, policy=policy, loader=loader)

    @classmethod
    def from_env(
        cls,
        var_name: str = BASE_PATH_ENV,
        overrides: Optional[Mapping[str, str]] = None,
        **kwargs,
    ) -> "PathRegistry":
        """Build a registry rooted at the directory named by ``var_name``."""
        return cls(base_path_from_env(var_name), overrides, **kwargs)

    @property
    def base(self) -> str:
        return self._base

    @property
    def policy(self) -> SanitizationPolicy:
        return self._sanitizer.policy

    @policy.setter
    def policy(self, policy: SanitizationPolicy) -> None:
        self._sanitizer = PathSanitizer(policy)

    @property
    def loader(self) -> PresetLoader:
        if self._loader is None:
            self._loader = default_loader()
        return self._loader

    def _snapshot(self) -> PathMap:
        self._load_pending_preset()
        with self._lock:
            return dict(self._paths)

    def _load_pending_preset(self) -> None:
        if self._pending_preset is None:
            return
        # Readers wait here until the pending preset has been merged.
        with self._preset_lock:
            preset_name = self._pending_preset
            if preset_name is None:
                return
            try:
                preset_paths = self.loader.load_preset(preset_name, self._base)
            except Exception as exc:  # pylint: disable=broad-except
                REGISTRY_LOGGER.warning(
                    "Lazy preset load failed; continuing without preset paths",
                    extra={
                        "event": "preset_lazy_load_failed",
                        "preset": preset_name,
                        "error_type": type(exc).__name__,
                    },
                )
            else:
                with self._lock:
                    self._paths = merge_paths(
                        self._paths, preset_paths, self._merge_strategy
                    )
            self._pending_preset = None

    def get(self, name: str, fallback=_UNSET) -> str:
        """Return the path registered under ``name``.

        Raises UnknownPathName when the name is missing and no fallback is
        supplied.
        """
        paths = self._snapshot()
        if name in paths:
            return paths[name]
        if fallback is not _UNSET:
            return fallback
        raise UnknownPathName(name)

    def has(self, name: str) -> bool:
        return name in self._snapshot()

    def all(self) -> PathMap:
        return self._snapshot()

    def names(self) -> list[str]:
        return sorted(self._snapshot())

    def set(self, name: str, raw_path: str) -> None:
        """Register ``raw_path`` under ``name`` after an escape check."""
        if not name:
            raise ConfigurationError("Path name cannot be empty")
        try:
            check_registration_path(raw_path)
        except PathValidationError as exc:
            REGISTRY_LOGGER.warning(
                "Path registration rejected",
                extra={
                    "event": "path_rejected",
                    "rule": exc.rule,
                    "path_name": name,
                    "fragment": scrub_for_log(raw_path),
                },
            )
            raise
        self._load_pending_preset()
        with self._lock:
            self._paths[name] = raw_path
        REGISTRY_LOGGER.info(
            "Path registered",
            extra={"event": "path_registered", "path_name": name, "path": raw_path},
        )

    def secure_path(self, base_path: str, fragment: str) -> str:
        """Join an untrusted ``fragment`` onto a trusted ``base_path``.

        The fragment is sanitized under the current policy; any violation
        raises a PathValidationError and nothing is returned.
        """
        sanitized = self._sanitizer.sanitize(fragment)
        joined = f"{trim_base(base_path)}{SEPARATOR}{sanitized}"
        REGISTRY_LOGGER.debug(
            "Path joined",
            extra={"event": "path_joined", "base_path": base_path, "path": joined},
        )
        return joined

    get_path = secure_path

    def resolve(self, name: str, fragment: str = "") -> str:
        """Return the named directory, or a file under it when given."""
        directory = self.get(name)
        if not fragment:
            return directory
        return self.secure_path(directory, fragment)

    def is_safe(self, fragment: str) -> bool:
        return self._sanitizer.is_safe(fragment)

    def _derive(
        self, paths: Mapping[str, str], policy: SanitizationPolicy
    ) -> "PathRegistry":
        derived = PathRegistry(
            self._base,
            policy=policy,
            loader=self._loader,
            merge_strategy=self._merge_strategy,
        )
        derived._paths = dict(paths)
        return derived

    def apply_preset(
        self, preset_name: str, merge_strategy: Optional[MergeStrategy] = None
    ) -> "PathRegistry":
        """Return a new registry with ``preset_name`` merged onto this map.

        This registry is left untouched. Raises UnknownPreset.
        """
        preset_paths = self.loader.load_preset(preset_name, self._base)
        strategy = merge_strategy or self._merge_strategy
        merged = merge_paths(self._snapshot(), preset_paths, strategy)
        REGISTRY_LOGGER.info(
            "Preset applied",
            extra={
                "event": "preset_applied",
                "preset": preset_name.lower(),
                "strategy": strategy.value,
                "entries": len(preset_paths),
            },
        )
        return self._derive(merged, self.policy)

    def with_policy(self, policy: SanitizationPolicy) -> "PathRegistry":
        """Return a copy of this registry that sanitizes under ``policy``."""
        return self._derive(self._snapshot(), policy)

    def __repr__(self) -> str:
        return f"PathRegistry(base={self._base!r}, policy={self.policy.name!r})"
