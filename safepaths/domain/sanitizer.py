"""Validation and normalization of untrusted relative path fragments."""

import html
import os
import re
import urllib.parse
from typing import Optional

from safepaths.bootstrap.logging_setup import scrub_for_log
from safepaths.domain.context_id import component_logger
from safepaths.domain.errors import (
    AbsolutePathNotAllowed,
    DangerousPattern,
    EmptyPath,
    ExtensionBlocked,
    ExtensionNotAllowed,
    FilenameTooLong,
    HiddenElementNotAllowed,
    NullByte,
    PathTooLong,
    PathTraversal,
    PathValidationError,
    TraversalPattern,
)
from safepaths.domain.policy import SanitizationPolicy

SANITIZER_LOGGER = component_logger("sanitizer")

SEPARATOR = os.sep
_ANY_SEPARATOR = re.compile(r"[\\/]+")
_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")


def basename(path: str) -> str:
    """Return the final segment of ``path``, splitting on ``/`` and ``\\``."""
    return _ANY_SEPARATOR.split(path)[-1]


def normalize(path: str, decode: bool = True) -> str:
    """Decode once, unify separators, collapse repeats and trim the ends."""
    if decode:
        path = urllib.parse.unquote(path)
        path = html.unescape(path)
    return _ANY_SEPARATOR.sub(lambda _match: SEPARATOR, path).strip(SEPARATOR)


def is_absolute(path: str) -> bool:
    if path.startswith(("/", "\\")):
        return True
    return os.name == "nt" and _DRIVE_LETTER.match(path) is not None


def find_dangerous_pattern(
    candidates: tuple[str, ...], policy: SanitizationPolicy
) -> Optional[tuple[str, bool]]:
    """Return the first ``(pattern, is_traversal)`` found in any candidate."""
    lowered = [candidate.lower() for candidate in candidates]
    for pattern, is_traversal in policy.dangerous_patterns():
        needle = pattern.lower()
        if any(needle in candidate for candidate in lowered):
            return pattern, is_traversal
    return None


def extension_of(path: str) -> str:
    """Lowercased text after the last dot of the basename, or ``""``."""
    name = basename(path)
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


class PathSanitizer:
    """Apply a :class:`SanitizationPolicy` to untrusted path fragments.

    Instances hold only the policy, so one sanitizer can be shared freely
    between threads.
    """

    def __init__(self, policy: Optional[SanitizationPolicy] = None) -> None:
        self.policy = policy or SanitizationPolicy()

    def sanitize(self, fragment: str) -> str:
        """Return the normalized fragment or raise a PathValidationError."""
        try:
            return self._sanitize(fragment)
        except PathValidationError as exc:
            SANITIZER_LOGGER.warning(
                "Path rejected",
                extra={
                    "event": "path_rejected",
                    "rule": exc.rule,
                    "fragment": scrub_for_log(fragment),
                    "policy": self.policy.name,
                },
            )
            raise

    def is_safe(self, fragment: str) -> bool:
        """Return True when ``fragment`` passes every check."""
        try:
            self._sanitize(fragment)
        except PathValidationError:
            return False
        return True

    def _sanitize(self, fragment: str) -> str:
        policy = self.policy
        self._check_basics(fragment)

        normalized = normalize(fragment, decode=policy.encoding_protection)
        if "\x00" in normalized:
            raise NullByte(fragment, "revealed by decoding")

        self._check_patterns(fragment, normalized)

        trusted = self._is_trusted(normalized)
        if not trusted:
            self._check_placement(fragment, normalized)
            if policy.extension_validation:
                self._check_extension(fragment, normalized)
        return normalized

    def _check_basics(self, fragment: str) -> None:
        policy = self.policy
        if not fragment:
            raise EmptyPath(fragment)
        if policy.length_validation and len(fragment) > policy.max_path_length:
            raise PathTooLong(
                fragment, f"{policy.max_path_length} characters maximum"
            )
        if "\x00" in fragment:
            raise NullByte(fragment)
        if (
            policy.length_validation
            and len(basename(fragment)) > policy.max_filename_length
        ):
            raise FilenameTooLong(
                fragment, f"{policy.max_filename_length} characters maximum"
            )

    def _check_patterns(self, fragment: str, normalized: str) -> None:
        policy = self.policy
        match = find_dangerous_pattern((normalized, fragment), policy)
        if match is not None:
            pattern, is_traversal = match
            if is_traversal:
                raise TraversalPattern(fragment, pattern)
            raise DangerousPattern(fragment, pattern)

        if not policy.traversal_protection:
            return
        if normalized.startswith("~"):
            raise TraversalPattern(fragment, "~")
        if ".." in normalized:
            raise PathTraversal(fragment)

    def _check_placement(self, fragment: str, normalized: str) -> None:
        policy = self.policy
        # normalize() trims leading separators, so check the raw fragment too.
        if policy.strict_mode and (
            is_absolute(fragment) or is_absolute(normalized)
        ):
            raise AbsolutePathNotAllowed(fragment)

        if policy.strict_mode or policy.hidden_file_protection:
            for part in normalized.split(SEPARATOR):
                if part.startswith(".") and part not in (".", ".."):
                    raise HiddenElementNotAllowed(fragment, part)

    def _check_extension(self, fragment: str, normalized: str) -> None:
        policy = self.policy
        extension = extension_of(normalized)
        if not extension:
            return
        if policy.allowed_extensions:
            if extension not in policy.allowed_extensions:
                raise ExtensionNotAllowed(fragment, extension)
            return
        if extension in policy.blocked_extensions:
            raise ExtensionBlocked(fragment, extension)

    def _is_trusted(self, normalized: str) -> bool:
        for prefix in self.policy.trusted_path_prefixes:
            trusted = normalize(prefix, decode=False)
            if trusted and (
                normalized == trusted or normalized.startswith(trusted + SEPARATOR)
            ):
                return True
        return False

    @classmethod
    def for_uploads(cls) -> "PathSanitizer":
        return cls(SanitizationPolicy.uploads())

    @classmethod
    def for_templates(cls) -> "PathSanitizer":
        return cls(SanitizationPolicy.templates())

    @classmethod
    def for_content(cls) -> "PathSanitizer":
        return cls(SanitizationPolicy.content())
