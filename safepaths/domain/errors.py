"""Exception hierarchy raised by the registry, sanitizer and preset loader."""

from typing import Optional

from safepaths.bootstrap.logging_setup import scrub_for_log


class SafePathsError(Exception):
    """Base class for every error raised by safepaths."""


class ConfigurationError(SafePathsError):
    """Raised when environment or constructor configuration is unusable."""


class UnknownPathName(SafePathsError, LookupError):
    """Raised when a symbolic path name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Path '{name}' not found")
        self.name = name


class UnknownPreset(SafePathsError, LookupError):
    """Raised when a preset name is not registered with the loader."""

    def __init__(self, name: str, available: Optional[list[str]] = None):
        message = f"Unknown preset '{name}'"
        if available is not None:
            message += f". Available presets: {', '.join(sorted(available))}"
        super().__init__(message)
        self.name = name
        self.available = available or []


class PathValidationError(SafePathsError, ValueError):
    """Raised when an untrusted path fragment violates a sanitization rule.

    ``rule`` is a stable machine-readable identifier for the check that
    failed; ``fragment`` is the raw caller input.
    """

    rule = "invalid_path"
    summary = "Invalid path"

    def __init__(self, fragment: str, detail: Optional[str] = None):
        message = self.summary
        if detail:
            message = f"{message}: {detail}"
        if fragment:
            message = f"{message} (path: '{scrub_for_log(fragment)}')"
        super().__init__(message)
        self.fragment = fragment


class EmptyPath(PathValidationError):
    rule = "empty_path"
    summary = "Path cannot be empty"


class PathTooLong(PathValidationError):
    rule = "path_too_long"
    summary = "Path too long"


class FilenameTooLong(PathValidationError):
    rule = "filename_too_long"
    summary = "Filename too long"


class NullByte(PathValidationError):
    rule = "null_byte"
    summary = "Path contains null byte"


class DangerousPattern(PathValidationError):
    """The fragment contains a blocked substring; ``pattern`` names it."""

    rule = "dangerous_pattern"
    summary = "Dangerous pattern detected in path"

    def __init__(self, fragment: str, pattern: str):
        super().__init__(fragment, scrub_for_log(pattern))
        self.pattern = pattern


class TraversalError(PathValidationError):
    """Category for every attempt to escape the base directory."""

    rule = "path_traversal"
    summary = "Path traversal detected"


class PathTraversal(TraversalError):
    pass


class TraversalPattern(DangerousPattern, TraversalError):
    """A dangerous pattern whose purpose is escaping the base directory."""

    rule = "traversal_pattern"


class AbsolutePathNotAllowed(PathValidationError):
    rule = "absolute_path"
    summary = "Absolute paths not allowed in strict mode"


class HiddenElementNotAllowed(PathValidationError):
    rule = "hidden_element"
    summary = "Hidden files/directories not allowed"


class ExtensionNotAllowed(PathValidationError):
    rule = "extension_not_allowed"
    summary = "File extension not in allowed list"

    def __init__(self, fragment: str, extension: str):
        super().__init__(fragment, f"'{extension}'")
        self.extension = extension


class ExtensionBlocked(PathValidationError):
    rule = "extension_blocked"
    summary = "File extension is blocked for security reasons"

    def __init__(self, fragment: str, extension: str):
        super().__init__(fragment, f"'{extension}'")
        self.extension = extension
