"""Unit tests for sanitization policy records and named policies."""

import dataclasses

import pytest

from safepaths.domain.errors import ConfigurationError
from safepaths.domain.policy import (
    DEFAULT_BLOCKED_EXTENSIONS,
    SanitizationPolicy,
)


def test_default_policy_values():
    """Defaults mirror the non-strict baseline configuration."""
    policy = SanitizationPolicy()

    assert policy.max_path_length == 4096
    assert policy.max_filename_length == 255
    assert policy.allowed_extensions == frozenset()
    assert policy.blocked_extensions == DEFAULT_BLOCKED_EXTENSIONS
    assert policy.strict_mode is False
    assert policy.hidden_file_protection is True
    assert policy.traversal_protection is True


def test_policy_is_immutable():
    """Policies are frozen snapshots."""
    policy = SanitizationPolicy()
    with pytest.raises(dataclasses.FrozenInstanceError):
        policy.strict_mode = True  # type: ignore[misc]


def test_extensions_are_lowercased_and_dot_stripped():
    """Extension sets are normalized on construction."""
    policy = SanitizationPolicy(
        allowed_extensions=frozenset({".JPG", "Pdf"}),
        blocked_extensions=frozenset({"EXE"}),
    )
    assert policy.allowed_extensions == frozenset({"jpg", "pdf"})
    assert policy.blocked_extensions == frozenset({"exe"})


def test_length_caps_never_drop_below_one():
    """Zero or negative caps are clamped."""
    policy = SanitizationPolicy(max_path_length=0, max_filename_length=-5)
    assert policy.max_path_length == 1
    assert policy.max_filename_length == 1


def test_with_changes_returns_new_policy():
    """with_changes leaves the original untouched."""
    original = SanitizationPolicy()
    changed = original.with_changes(strict_mode=True)
    assert changed.strict_mode is True
    assert original.strict_mode is False


def test_named_policies():
    """Every named policy carries its distinguishing settings."""
    uploads = SanitizationPolicy.uploads()
    assert uploads.strict_mode is True
    assert "jpg" in uploads.allowed_extensions
    assert uploads.max_filename_length == 100

    templates = SanitizationPolicy.templates()
    assert templates.strict_mode is False
    assert templates.hidden_file_protection is False
    assert "twig" in templates.allowed_extensions

    content = SanitizationPolicy.content()
    assert content.strict_mode is False
    assert content.allowed_extensions == frozenset({"md", "txt", "json", "yaml", "yml"})

    development = SanitizationPolicy.development()
    assert development.max_path_length == 8192
    assert development.hidden_file_protection is False

    production = SanitizationPolicy.production()
    assert production.strict_mode is True
    assert production.max_path_length == 2048


@pytest.mark.parametrize(
    "name", ["default", "uploads", "templates", "content", "development", "production"]
)
def test_named_lookup(name):
    """named() resolves each CLI policy choice."""
    assert SanitizationPolicy.named(name).name == name


def test_named_lookup_rejects_unknown_policy():
    """Unknown policy names are configuration errors."""
    with pytest.raises(ConfigurationError, match="Unknown policy"):
        SanitizationPolicy.named("lenient")


def test_dangerous_patterns_respect_toggles():
    """Disabling protections removes their patterns from the scan."""
    full = dict(SanitizationPolicy().dangerous_patterns())
    assert full["../"] is True
    assert full["%2e%2e"] is True
    assert full["%00"] is False
    assert full["<?php"] is False

    relaxed = dict(
        SanitizationPolicy(
            traversal_protection=False, encoding_protection=False
        ).dangerous_patterns()
    )
    assert "../" not in relaxed
    assert "%2e%2e" not in relaxed
    assert "%00" not in relaxed
    assert "file://" in relaxed


def test_from_env_reads_settings(monkeypatch):
    """Environment variables seed the policy."""
    monkeypatch.setenv("SAFEPATHS_MAX_PATH_LENGTH", "512")
    monkeypatch.setenv("SAFEPATHS_STRICT_MODE", "yes")
    monkeypatch.setenv("SAFEPATHS_HIDDEN_FILE_PROTECTION", "0")
    monkeypatch.setenv("SAFEPATHS_EXTRA_DANGEROUS_PATTERNS", "secret, internal ,")
    monkeypatch.setenv("SAFEPATHS_TRUSTED_PREFIXES", "vendor/assets")

    policy = SanitizationPolicy.from_env()

    assert policy.max_path_length == 512
    assert policy.max_filename_length == 255
    assert policy.strict_mode is True
    assert policy.hidden_file_protection is False
    assert policy.custom_dangerous_patterns == ("secret", "internal")
    assert policy.trusted_path_prefixes == ("vendor/assets",)


def test_from_env_rejects_malformed_integer(monkeypatch):
    """Non-numeric limits surface as configuration errors."""
    monkeypatch.setenv("SAFEPATHS_MAX_PATH_LENGTH", "lots")
    with pytest.raises(ConfigurationError, match="SAFEPATHS_MAX_PATH_LENGTH"):
        SanitizationPolicy.from_env()
