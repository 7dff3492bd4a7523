"""
Centralized constants for ngkeeper.

This module defines immutable configuration values used across ngkeeper,
including network settings, registry endpoints, package naming rules for
the Angular ecosystem, and logging formats. All values are intended to be
treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = (
    "ngkeeper/{version} (https://github.com/ngkeeper/ngkeeper)"
)

# ---------------------------------------------------------------------------
# npm registry
# ---------------------------------------------------------------------------

#: Base URL of the public npm registry.
NPM_REGISTRY_URL: Final[str] = "https://registry.npmjs.org"

#: Packument endpoint relative to the registry base URL.
NPM_PACKAGE_PATH: Final[str] = "{registry}/{package}"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

#: Maximum number of registry fetches in flight at once.
DEFAULT_CONCURRENT_LIMIT: Final[int] = 10

# ---------------------------------------------------------------------------
# Analysis defaults
# ---------------------------------------------------------------------------

#: Framework major version targeted when none is configured.
DEFAULT_TARGET_MAJOR: Final[int] = 17

#: Default manifest file name.
DEFAULT_MANIFEST_FILE: Final[str] = "package.json"

#: Conventional name for the rewritten manifest.
DEFAULT_OUTPUT_FILE: Final[str] = "package-updated.json"

# ---------------------------------------------------------------------------
# Framework package naming
# ---------------------------------------------------------------------------

#: Human-readable framework name used in analysis notes.
FRAMEWORK_NAME: Final[str] = "Angular"

#: Scope shared by every framework-owned package.
FRAMEWORK_SCOPE: Final[str] = "@angular/"

#: Package whose peer dependency declares framework compatibility.
FRAMEWORK_CORE_PACKAGE: Final[str] = "@angular/core"

#: Name fragments marking UI-toolkit packages released outside core cadence.
FRAMEWORK_TOOLKIT_MARKERS: Final[Sequence[str]] = ("material", "cdk")

#: Name prefixes of community packages built around the framework.
ECOSYSTEM_PREFIXES: Final[Sequence[str]] = ("ng-", "ngx-", "@ng-")

#: Name fragments of first-party toolkit and state-management packages.
ECOSYSTEM_MARKERS: Final[Sequence[str]] = (
    "@angular/material",
    "@angular/cdk",
    "@ngrx/",
)

# ---------------------------------------------------------------------------
# Version heuristics
# ---------------------------------------------------------------------------

#: Substrings that mark a version string as a pre-release.
PRERELEASE_KEYWORDS: Final[Sequence[str]] = (
    "canary",
    "beta",
    "rc",
    "alpha",
    "next",
    "dev",
    "snapshot",
    "preview",
    "experimental",
)

#: Characters stripped from a declared constraint to get the current version.
RANGE_OPERATOR_CHARS: Final[str] = "^~>=<"

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading manifest files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
