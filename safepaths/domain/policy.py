"""Sanitization policy record and its static pattern/extension tables."""

from dataclasses import dataclass, field, replace
from typing import Iterable

from safepaths.bootstrap.config import (
    DEFAULT_MAX_FILENAME_LENGTH,
    DEFAULT_MAX_PATH_LENGTH,
    env_policy_settings,
)
from safepaths.domain.errors import ConfigurationError

DEFAULT_BLOCKED_EXTENSIONS = frozenset(
    {
        "php", "phtml", "php3", "php4", "php5", "phar",
        "exe", "bat", "cmd", "com", "scr", "vbs", "js",
        "jar", "sh", "py", "pl", "rb", "asp", "aspx",
        "jsp", "cgi", "htaccess", "htpasswd",
    }
)  # fmt: skip

# Order matters: the first match is the one reported.
TRAVERSAL_PATTERNS = ("../", "..\\", "./", ".\\", "~/", "~\\")
ENCODED_PATTERNS = ("%00", "%2e%2e", "%2f", "%5c")
ENCODED_TRAVERSAL_PATTERNS = frozenset({"%2e%2e", "%2f", "%5c"})
SCHEME_PATTERNS = (
    "file://", "http://", "https://", "ftp://",
    "php://", "data://", "expect://", "zip://",
)  # fmt: skip
CODE_PATTERNS = (
    "<script", "</script>", "<?php", "<?=",
    "eval(", "exec(", "system(", "shell_exec(",
    "passthru(", "file_get_contents(", "include(",
    "require(", "include_once(", "require_once(",
)  # fmt: skip

UPLOAD_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp", "pdf", "txt", "doc", "docx")
TEMPLATE_EXTENSIONS = ("phtml", "twig", "html", "htm", "xml")
CONTENT_EXTENSIONS = ("md", "txt", "json", "yaml", "yml")


def _lowered(values: Iterable[str]) -> frozenset[str]:
    return frozenset(value.lower().lstrip(".") for value in values)


@dataclass(frozen=True)
class SanitizationPolicy:
    """Rules applied to one untrusted path fragment.

    An empty ``allowed_extensions`` means no whitelist; when a whitelist is
    set it replaces ``blocked_extensions`` entirely. Trusted prefixes skip the
    absolute-path, hidden-element and extension checks but never the
    null-byte, dangerous-pattern, traversal or length checks.
    """

    max_path_length: int = DEFAULT_MAX_PATH_LENGTH
    max_filename_length: int = DEFAULT_MAX_FILENAME_LENGTH
    allowed_extensions: frozenset[str] = frozenset()
    blocked_extensions: frozenset[str] = DEFAULT_BLOCKED_EXTENSIONS
    strict_mode: bool = False
    hidden_file_protection: bool = True
    custom_dangerous_patterns: tuple[str, ...] = ()
    trusted_path_prefixes: tuple[str, ...] = ()
    traversal_protection: bool = True
    encoding_protection: bool = True
    extension_validation: bool = True
    length_validation: bool = True
    name: str = field(default="default", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "max_path_length", max(1, self.max_path_length))
        object.__setattr__(
            self, "max_filename_length", max(1, self.max_filename_length)
        )
        object.__setattr__(
            self, "allowed_extensions", _lowered(self.allowed_extensions)
        )
        object.__setattr__(
            self, "blocked_extensions", _lowered(self.blocked_extensions)
        )
        object.__setattr__(
            self, "custom_dangerous_patterns", tuple(self.custom_dangerous_patterns)
        )
        object.__setattr__(
            self, "trusted_path_prefixes", tuple(self.trusted_path_prefixes)
        )

    def dangerous_patterns(self) -> list[tuple[str, bool]]:
        """Return ``(pattern, is_traversal)`` pairs active under this policy."""
        patterns: list[tuple[str, bool]] = []
        if self.traversal_protection:
            patterns.extend((pattern, True) for pattern in TRAVERSAL_PATTERNS)
        patterns.extend((pattern, False) for pattern in SCHEME_PATTERNS)
        if self.encoding_protection:
            for pattern in ENCODED_PATTERNS:
                is_traversal = pattern in ENCODED_TRAVERSAL_PATTERNS
                if is_traversal and not self.traversal_protection:
                    continue
                patterns.append((pattern, is_traversal))
        patterns.extend((pattern, False) for pattern in CODE_PATTERNS)
        patterns.extend((pattern, False) for pattern in self.custom_dangerous_patterns)
        return patterns

    def with_changes(self, **changes) -> "SanitizationPolicy":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> "SanitizationPolicy":
        """Build the default policy from ``SAFEPATHS_*`` variables."""
        return cls(name="env", **env_policy_settings())

    @classmethod
    def uploads(cls) -> "SanitizationPolicy":
        return cls(
            allowed_extensions=frozenset(UPLOAD_EXTENSIONS),
            max_path_length=1024,
            max_filename_length=100,
            strict_mode=True,
            name="uploads",
        )

    @classmethod
    def templates(cls) -> "SanitizationPolicy":
        return cls(
            allowed_extensions=frozenset(TEMPLATE_EXTENSIONS),
            max_path_length=2048,
            max_filename_length=200,
            strict_mode=False,
            hidden_file_protection=False,
            name="templates",
        )

    @classmethod
    def content(cls) -> "SanitizationPolicy":
        return cls(
            allowed_extensions=frozenset(CONTENT_EXTENSIONS),
            max_path_length=2048,
            max_filename_length=200,
            strict_mode=False,
            name="content",
        )

    @classmethod
    def development(cls) -> "SanitizationPolicy":
        return cls(
            strict_mode=False,
            hidden_file_protection=False,
            max_path_length=8192,
            max_filename_length=500,
            name="development",
        )

    @classmethod
    def production(cls) -> "SanitizationPolicy":
        return cls(
            strict_mode=True,
            hidden_file_protection=True,
            max_path_length=2048,
            max_filename_length=200,
            name="production",
        )

    @classmethod
    def named(cls, policy_name: str) -> "SanitizationPolicy":
        """Look up a named policy; ``default`` is the plain constructor."""
        factories = {
            "default": cls,
            "uploads": cls.uploads,
            "templates": cls.templates,
            "content": cls.content,
            "development": cls.development,
            "production": cls.production,
        }
        try:
            factory = factories[policy_name.lower()]
        except KeyError as exc:
            raise ConfigurationError(f"Unknown policy '{policy_name}'") from exc
        return factory()
