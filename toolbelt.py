#!/usr/bin/env python3
"""toolbelt - helpers for macOS / Apple-platform build and packaging scripts.

This module provides small, independent tools for:
1. Selecting files with glob patterns and copying them between directories
2. Compiling XIB interface files to NIB with ibtool
3. Codesigning bundles and packages with codesign
4. Resolving SDK roots and include directories from environment variables
5. Reading a display name and version from the project manifest

Every function is stateless and synchronous. Failures are raised as
subclasses of ToolbeltError; nothing is retried.

Usage (API):
    from toolbelt import (
        IncludeDirFormat,
        codesign,
        compile_xibs,
        copy_dir_with_pattern,
        get_package_name,
        get_sdk_include_dirs,
        get_sdk_path,
    )

    copy_dir_with_pattern("assets", "build/assets", "**/*.{png,json}")
    compile_xibs("ui", "build/MyApp.app/Contents/Resources")
    codesign("build/MyApp.app")

    sdk = get_sdk_path("VST3_SDK")
    flags = get_sdk_include_dirs(["pluginterfaces/**"], sdk, IncludeDirFormat.CLANG)

    get_package_name(with_version=True)  # "My Package 1.2.3"
"""

import datetime
import logging
import os
import re
import shutil
import subprocess
import sys
from collections.abc import Iterable
from enum import Enum
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

# ----------------------------------------------------------------------------
# Constants

__version__ = "0.1.0"

# Type aliases
Pathlike = Path | str

# External tools, looked up on PATH
IBTOOL = "ibtool"
CODESIGN = "codesign"

# Ad-hoc signing identity
ADHOC_IDENTITY = "-"

# Environment variable names
ENV_DEV_ID = "DEV_ID"

# Default pattern used to find interface files
DEFAULT_XIB_PATTERN = "*.xib"
NIB_SUFFIX = ".nib"

# Manifest files searched for, in order of preference
MANIFEST_FILES = ["pyproject.toml", "Cargo.toml"]

# Manifest tables that may carry the package name and version
MANIFEST_TABLES = [("project",), ("tool", "poetry"), ("package",)]

# Placed between the formatted name and the version
VERSION_SEPARATOR = " "

# Characters that make a path segment a wildcard segment
GLOB_CHARS = "*?[{"

# Explicit word separators for title casing; camelCase humps split further
WORD_SEPARATORS = re.compile(r"[\W_]+")

# ----------------------------------------------------------------------------
# Optional dotenv support (zero production dependencies)


def _load_dotenv() -> None:
    """Attempt to load .env file if python-dotenv is available."""
    try:
        from dotenv import find_dotenv, load_dotenv

        # search from the working directory, not from this module's location
        load_dotenv(find_dotenv(usecwd=True))
    except ImportError:
        pass


_load_dotenv()

# ----------------------------------------------------------------------------
# Configuration file support


def load_config(config_path: Path | None = None) -> dict[str, object]:
    """Load configuration from a TOML file.

    Searches for configuration in the following order:
    1. Explicit config_path if provided
    2. .toolbelt.toml in current directory
    3. toolbelt.toml in current directory

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Configuration dictionary (empty if no config found)

    Example .toolbelt.toml:
        [codesign]
        identity = "Developer ID Application: John Doe (ABCD123456)"
        entitlements = "entitlements.plist"

        [manifest]
        path = "rust/Cargo.toml"
    """
    log = logging.getLogger("toolbelt")

    if config_path and config_path.exists():
        paths_to_try = [config_path]
    else:
        cwd = Path.cwd()
        paths_to_try = [
            cwd / ".toolbelt.toml",
            cwd / "toolbelt.toml",
        ]

    for path in paths_to_try:
        if path.exists():
            try:
                with open(path, "rb") as f:
                    data: dict[str, object] = tomllib.load(f)
                return data
            except (OSError, tomllib.TOMLDecodeError) as e:
                log.warning("skipping config file %s: %s", path, e)
                continue

    return {}


def get_config_value(
    config: dict[str, object],
    section: str,
    key: str,
    default: str | None = None,
) -> str | None:
    """Get a value from config with section.key lookup.

    Args:
        config: Configuration dictionary
        section: Section name (e.g., "codesign", "manifest")
        key: Key name within section
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    section_config = config.get(section, {})
    if not isinstance(section_config, dict):
        return default
    value = section_config.get(key, default)
    if value is None or isinstance(value, str):
        return value
    return default


# Global config (loaded lazily)
_config: dict[str, object] | None = None


def get_config() -> dict[str, object]:
    """Get the global configuration, loading it if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


# ----------------------------------------------------------------------------
# Error handling


class ToolbeltError(Exception):
    """Base exception class for toolbelt errors."""


class CommandError(ToolbeltError):
    """Exception raised when an external command fails or cannot start."""

    def __init__(
        self, command: str, returncode: int | None, output: str | None = None
    ):
        self.command = command
        self.returncode = returncode
        self.output = output
        if returncode is None:
            message = f"Command '{command}' could not be started"
        else:
            message = (
                f"Command '{command}' failed with return code {returncode}"
            )
        if output and output.strip():
            message = f"{message}: {output.strip()}"
        super().__init__(message)


class FileError(ToolbeltError):
    """Exception raised when a file operation fails."""


class ConfigurationError(ToolbeltError):
    """Exception raised when configuration is invalid."""


class MissingVariableError(ConfigurationError):
    """Exception raised when a required environment variable is unset."""


class PathNotFoundError(ConfigurationError):
    """Exception raised when a configured path does not exist."""


class CodesignError(ToolbeltError):
    """Exception raised when codesigning fails."""

    def __init__(self, message: str, output: str | None = None):
        self.output = output
        super().__init__(message)


class ManifestError(ToolbeltError):
    """Exception raised when the manifest is missing or incomplete."""


# ----------------------------------------------------------------------------
# File validation


def validate_file(path: Pathlike) -> Path:
    """Check that path is an existing, readable regular file.

    Args:
        path: Path to the file to validate

    Returns:
        The path as a Path

    Raises:
        FileError: If any check fails
    """
    path = Path(path)

    if not path.exists():
        raise FileError(f"File does not exist: {path}")

    if not path.is_file():
        raise FileError(f"Path is not a regular file: {path}")

    if not os.access(path, os.R_OK):
        raise FileError(f"File is not readable: {path}")

    return path


# ----------------------------------------------------------------------------
# Logging configuration


class CustomFormatter(logging.Formatter):
    """Custom logging formatting class with color support."""

    class color:
        """Text colors for terminal output."""

        white = "\x1b[97;20m"
        grey = "\x1b[38;20m"
        green = "\x1b[32;20m"
        cyan = "\x1b[36;20m"
        yellow = "\x1b[33;20m"
        red = "\x1b[31;20m"
        bold_red = "\x1b[31;1m"
        reset = "\x1b[0m"

    cfmt = (
        f"{color.white}%(delta)s{color.reset} - "
        f"{{}}%(levelname)s{color.reset} - "
        f"{color.white}%(name)s.%(funcName)s{color.reset} - "
        f"{color.grey}%(message)s{color.reset}"
    )

    FORMATS = {
        logging.DEBUG: cfmt.format(color.grey),
        logging.INFO: cfmt.format(color.green),
        logging.WARNING: cfmt.format(color.yellow),
        logging.ERROR: cfmt.format(color.red),
        logging.CRITICAL: cfmt.format(color.bold_red),
    }

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color
        self.fmt = (
            "%(delta)s - %(levelname)s - %(name)s.%(funcName)s - %(message)s"
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with color if enabled."""
        if not self.use_color:
            log_fmt = self.fmt
        else:
            log_fmt = self.FORMATS[record.levelno]
        duration = datetime.datetime.fromtimestamp(
            record.relativeCreated / 1000, datetime.timezone.utc
        )
        record.delta = duration.strftime("%H:%M:%S")
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


def setup_logging(debug: bool = True, use_color: bool = True) -> None:
    """Configure logging for a build script using toolbelt.

    Args:
        debug: Whether to enable debug logging
        use_color: Whether to use colored output
    """
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(CustomFormatter(use_color))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        handlers=[stream_handler],
    )


# ----------------------------------------------------------------------------
# Command execution utilities


def run_command(
    command: list[str],
    dry_run: bool = False,
    log: logging.Logger | None = None,
) -> str:
    """Run a command and return its output.

    All external tools are spawned through this function, with
    shell=False and captured output.

    Args:
        command: The command as a list of arguments
        dry_run: If True, log command but don't execute (default: False)
        log: Optional logger for debug/dry-run output

    Returns:
        The command stdout output

    Raises:
        CommandError: If the command exits non-zero or cannot be started
    """
    cmd_str = " ".join(command)
    if log:
        log.debug("%s", cmd_str)
    if dry_run:
        if log:
            log.info("[DRY RUN] %s", cmd_str)
        return ""
    try:
        result = subprocess.run(
            command, shell=False, check=True, text=True, capture_output=True
        )
        return result.stdout
    except subprocess.CalledProcessError as e:
        raise CommandError(cmd_str, e.returncode, e.stderr or e.output) from e
    except OSError as e:
        raise CommandError(cmd_str, None, str(e)) from e


# ----------------------------------------------------------------------------
# Glob pattern matching


def _brace_group(pattern: str, start: int) -> tuple[int | None, list[str]]:
    """Split the brace group opening at start into its top-level options."""
    depth = 0
    options = []
    current = start + 1
    for i in range(start, len(pattern)):
        ch = pattern[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                options.append(pattern[current:i])
                return i, options
        elif ch == "," and depth == 1:
            options.append(pattern[current:i])
            current = i + 1
    return None, []


def expand_braces(pattern: str) -> list[str]:
    """Expand `{a,b}` alternations in a glob pattern.

    Groups may nest. Alternatives are produced left to right, so
    `x{a,b}{1,2}` gives `xa1, xa2, xb1, xb2`. An unbalanced brace, or a
    group without a comma, is kept as literal text.

    Args:
        pattern: The glob pattern

    Returns:
        The list of brace-free patterns
    """
    start = pattern.find("{")
    while start != -1:
        end, options = _brace_group(pattern, start)
        if end is not None and len(options) > 1:
            prefix, suffix = pattern[:start], pattern[end + 1 :]
            expanded = []
            for option in options:
                expanded.extend(expand_braces(prefix + option + suffix))
            return expanded
        start = pattern.find("{", start + 1)
    return [pattern]


def _translate_segment(segment: str) -> str:
    """Translate one path segment of a glob into a regex."""
    parts = []
    i, n = 0, len(segment)
    while i < n:
        ch = segment[i]
        i += 1
        if ch == "*":
            parts.append("[^/]*")
        elif ch == "?":
            parts.append("[^/]")
        elif ch == "[":
            j = i
            if j < n and segment[j] in "!^":
                j += 1
            if j < n and segment[j] == "]":
                j += 1
            while j < n and segment[j] != "]":
                j += 1
            if j >= n:
                # unclosed class
                parts.append(re.escape(ch))
                continue
            body = segment[i:j]
            i = j + 1
            negate = body[0] in "!^"
            if negate:
                body = body[1:]
            body = (
                body.replace("\\", "\\\\")
                .replace("[", "\\[")
                .replace("]", "\\]")
            )
            parts.append(f"[^/{body}]" if negate else f"[{body}]")
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


def _translate(pattern: str) -> str:
    """Translate a brace-free glob into a regex over '/'-separated paths."""
    segments = pattern.split("/")
    out = ""
    for i, segment in enumerate(segments):
        last = i == len(segments) - 1
        if segment == "**":
            if not last:
                out += "(?:.*/)?"
            elif out.endswith("/"):
                # "dir/**" also matches "dir" itself
                out = out[:-1] + "(?:/.*)?"
            else:
                out += ".*"
        else:
            out += _translate_segment(segment)
            if not last:
                out += "/"
    return out


def compile_pattern(
    pattern: str,
    case_sensitive: bool = True,
    anchored: bool | None = None,
) -> re.Pattern[str]:
    """Compile a glob pattern into a regex matching relative paths.

    Supported syntax: `*` and `?` within a path segment, `[...]` and
    `[!...]` character classes, `**` for any number of directories and
    `{a,b}` alternation. Wildcards match names starting with a dot.

    A pattern with no `/` is matched against entry names at any depth
    (`*.txt` matches `a/b/c.txt`); a pattern with a `/` is anchored at
    the base. Pass anchored=True or False to override. A leading `/`
    always anchors.

    Args:
        pattern: The glob pattern, '/'-separated
        case_sensitive: Whether letters must match case exactly
        anchored: Force or disable anchoring at the base directory

    Returns:
        A compiled regex for use with fullmatch()
    """
    pattern = pattern.replace(os.sep, "/")
    if pattern.startswith("/"):
        pattern = pattern.lstrip("/")
        anchored = True

    alternatives = []
    for expanded in expand_braces(pattern):
        expanded = expanded.rstrip("/")
        is_anchored = "/" in expanded if anchored is None else anchored
        regex = _translate(expanded)
        if not is_anchored:
            regex = "(?:.*/)?" + regex
        alternatives.append(f"(?:{regex})")

    flags = re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE
    return re.compile("|".join(alternatives), flags)


def _raise_walk_error(error: OSError) -> None:
    raise FileError(
        f"Cannot read directory {error.filename}: {error}"
    ) from error


def match_files(
    base: Pathlike,
    pattern: str,
    case_sensitive: bool = True,
    anchored: bool | None = None,
    include_files: bool = True,
    include_dirs: bool = False,
) -> list[Path]:
    """Enumerate the entries under base whose relative path matches pattern.

    Symlinked directories are reported when include_dirs is set, but they
    are never descended into. Symlinks to files are treated as files.

    Args:
        base: Directory to search
        pattern: Glob pattern relative to base (see compile_pattern)
        case_sensitive: Whether letters must match case exactly
        anchored: Force or disable anchoring at base
        include_files: Report matching files
        include_dirs: Report matching directories

    Returns:
        Matching paths (base / relative path), sorted by relative path

    Raises:
        FileError: If base is not a directory or cannot be walked
    """
    base = Path(base)
    if not base.is_dir():
        raise FileError(f"Directory does not exist: {base}")

    regex = compile_pattern(pattern, case_sensitive, anchored)
    literal, max_depth = _walk_limits(pattern, anchored)
    if not case_sensitive:
        literal = [segment.lower() for segment in literal]
    matches: list[tuple[str, Path]] = []

    for root, dirs, files in os.walk(base, onerror=_raise_walk_error):
        root_path = Path(root)
        rel_root = root_path.relative_to(base)
        names = []
        if include_dirs:
            names.extend(dirs)
        if include_files:
            names.extend(files)
        for name in names:
            rel = (rel_root / name).as_posix()
            if regex.fullmatch(rel):
                matches.append((rel, root_path / name))

        depth = len(rel_root.parts)
        if max_depth is not None and depth + 1 >= max_depth:
            dirs[:] = []
        elif depth < len(literal):
            dirs[:] = [
                d
                for d in dirs
                if (d if case_sensitive else d.lower()) == literal[depth]
            ]

    return [path for _, path in sorted(matches)]


def _walk_limits(
    pattern: str, anchored: bool | None
) -> tuple[list[str], int | None]:
    """Return the literal leading segments and depth limit of a pattern.

    Only anchored, brace-free patterns constrain the walk. The depth limit
    is None when the pattern contains `**`.
    """
    pattern = pattern.replace(os.sep, "/")
    if pattern.startswith("/"):
        pattern = pattern.lstrip("/")
        anchored = True
    pattern = pattern.rstrip("/")
    if anchored is None:
        anchored = "/" in pattern
    if not anchored or "{" in pattern:
        return [], None

    segments = pattern.split("/")
    literal = []
    for segment in segments:
        if any(c in segment for c in GLOB_CHARS):
            break
        literal.append(segment)
    max_depth = None if "**" in segments else len(segments)
    return literal, max_depth


def _split_literal_prefix(pattern: str) -> tuple[Path, str]:
    """Split pattern into its leading wildcard-free directory and the rest."""
    parts = pattern.replace(os.sep, "/").split("/")
    for i, part in enumerate(parts):
        if any(c in part for c in GLOB_CHARS):
            prefix = "/".join(parts[:i])
            if not prefix:
                prefix = "/" if pattern.startswith(("/", os.sep)) else "."
            return Path(prefix), "/".join(parts[i:])
    return Path(pattern), ""


# ----------------------------------------------------------------------------
# Directory copier


def copy_dir_with_pattern(
    source: Pathlike,
    destination: Pathlike,
    pattern: str,
    case_sensitive: bool = True,
    dry_run: bool = False,
) -> list[Path]:
    """Copy files from one directory to another, selected by a glob pattern.

    The relative structure below source is reproduced below destination,
    creating intermediate directories as needed. Matches are collected
    before copying starts. A failure part way through leaves the files
    already copied in place.

    Args:
        source: Source root directory
        destination: Destination root directory
        pattern: Glob pattern such as `*.{txt,csv}` or `**/*`
        case_sensitive: Whether letters must match case exactly
        dry_run: If True, only log what would be copied

    Returns:
        The destination paths of the copied files, in match order

    Raises:
        FileError: If source is missing, a file cannot be read or a
            destination directory cannot be created

    Example:
        copy_dir_with_pattern("test/my_files", "target/dest", "*.{txt,md}")
    """
    log = logging.getLogger("toolbelt")

    source_path = Path(source)
    if not source_path.is_dir():
        raise FileError(f"Source directory does not exist: {source_path}")
    source_path = source_path.resolve()
    destination_path = Path(destination)

    entries = match_files(source_path, pattern, case_sensitive=case_sensitive)
    copied = []
    created: set[Path] = set()

    for entry in entries:
        target = destination_path / entry.relative_to(source_path)
        if dry_run:
            log.info("[DRY RUN] Would copy %s to %s", entry, target)
            copied.append(target)
            continue

        if target.parent not in created:
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileError(
                    f"Cannot create directory {target.parent}: {e}"
                ) from e
            created.add(target.parent)

        log.debug("copy %s -> %s", entry, target)
        try:
            shutil.copy(entry, target)
        except OSError as e:
            raise FileError(f"Cannot copy {entry} to {target}: {e}") from e
        copied.append(target)

    log.info(
        "Copied %d files matching '%s' to %s",
        len(copied),
        pattern,
        destination_path,
    )
    return copied


# ----------------------------------------------------------------------------
# XIB to NIB compilation


def compile_xib_to_nib(
    source: Pathlike,
    destination: Pathlike,
    minimum_deployment_target: str | None = None,
    dry_run: bool = False,
) -> Path:
    """Compile an Apple XIB file to a NIB file using ibtool from Xcode.

    Args:
        source: Path to the .xib file
        destination: Output .nib path, or an existing directory to place
            `<stem>.nib` in
        minimum_deployment_target: Passed to ibtool when given
        dry_run: If True, only log the ibtool command

    Returns:
        Path to the compiled .nib

    Raises:
        FileError: If the source file is missing or the output directory
            cannot be created
        CommandError: If ibtool fails or cannot be started
    """
    log = logging.getLogger("toolbelt")

    source_path = validate_file(source)
    nib_path = Path(destination)
    if nib_path.is_dir():
        nib_path = nib_path / (source_path.stem + NIB_SUFFIX)

    if not dry_run:
        try:
            nib_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileError(
                f"Cannot create directory {nib_path.parent}: {e}"
            ) from e

    command = [IBTOOL, "--compile", str(nib_path)]
    if minimum_deployment_target:
        command.extend(
            ["--minimum-deployment-target", minimum_deployment_target]
        )
    command.append(str(source_path))

    log.debug("Compile xib from %s to %s", source_path, nib_path)
    run_command(command, dry_run=dry_run, log=log)
    return nib_path


def compile_xibs(
    source_dir: Pathlike,
    destination_dir: Pathlike,
    pattern: str = DEFAULT_XIB_PATTERN,
    minimum_deployment_target: str | None = None,
    dry_run: bool = False,
) -> list[Path]:
    """Compile every XIB below source_dir into destination_dir.

    The directory structure below source_dir is kept: `ui/en/Main.xib`
    becomes `<destination_dir>/en/Main.nib`.

    Returns:
        Paths of the compiled .nib files
    """
    log = logging.getLogger("toolbelt")

    source_path = Path(source_dir)
    destination_path = Path(destination_dir)
    nibs = []
    for xib in match_files(source_path, pattern):
        nib = (destination_path / xib.relative_to(source_path)).with_suffix(
            NIB_SUFFIX
        )
        nibs.append(
            compile_xib_to_nib(
                xib,
                nib,
                minimum_deployment_target=minimum_deployment_target,
                dry_run=dry_run,
            )
        )
    log.info("Compiled %d xib files into %s", len(nibs), destination_path)
    return nibs


# ----------------------------------------------------------------------------
# Codesigning


def codesign(
    package: Pathlike,
    identity: str | None = None,
    entitlements: Pathlike | None = None,
    hardened_runtime: bool = False,
    timestamp: bool = False,
    deep: bool = False,
    dry_run: bool = False,
) -> str:
    """Sign a package or bundle using codesign from Xcode.

    The signing identity is taken from the identity argument, then the
    DEV_ID environment variable, then `[codesign] identity` in the config
    file, and finally falls back to ad-hoc signing ("-").

    The package path is handed to codesign as is; a missing bundle is
    reported through codesign's own diagnostics.

    Args:
        package: Path to the package's root folder or binary
        identity: Signing identity (name, hash or "-")
        entitlements: Path to an entitlements.plist
        hardened_runtime: Add `--options runtime`
        timestamp: Request a secure timestamp
        deep: Sign nested code too
        dry_run: If True, only log the codesign command

    Returns:
        The codesign stdout output

    Raises:
        ConfigurationError: If the entitlements file does not exist
        CodesignError: If codesign fails or cannot be started
    """
    log = logging.getLogger("toolbelt")
    config = get_config()

    if identity is None:
        identity = os.getenv(ENV_DEV_ID) or get_config_value(
            config, "codesign", "identity", ADHOC_IDENTITY
        )
    if not identity:
        identity = ADHOC_IDENTITY

    if entitlements is None:
        entitlements = get_config_value(config, "codesign", "entitlements")
    entitlements_path = Path(entitlements) if entitlements else None
    if entitlements_path and not entitlements_path.exists():
        raise ConfigurationError(
            f"Entitlements file not found: {entitlements_path}"
        )

    command = [CODESIGN, "--force", "--sign", identity]
    if timestamp:
        command.append("--timestamp")
    if deep:
        command.append("--deep")
    if hardened_runtime:
        command.extend(["--options", "runtime"])
    if entitlements_path:
        command.extend(["--entitlements", str(entitlements_path)])
    command.append(str(package))

    if identity == ADHOC_IDENTITY:
        log.info("signing (ad-hoc): %s", package)
    else:
        log.info("signing as '%s': %s", identity, package)

    try:
        return run_command(command, dry_run=dry_run, log=log)
    except CommandError as e:
        detail = (e.output or "").strip() or str(e)
        raise CodesignError(
            f"Failed to sign {package}: {detail}", output=e.output
        ) from e


def verify_signature(package: Pathlike, strict: bool = False) -> bool:
    """Verify the code signature of a package.

    Args:
        package: Path to verify
        strict: Add `--strict` to the verification

    Returns:
        True if codesign accepts the signature

    Raises:
        CommandError: If codesign cannot be started
    """
    log = logging.getLogger("toolbelt")
    command = [CODESIGN, "--verify", "--verbose"]
    if strict:
        command.append("--strict")
    command.append(str(package))
    try:
        run_command(command, log=log)
    except CommandError as e:
        if e.returncode is None:
            raise
        log.debug("verification failed for %s: %s", package, e)
        return False
    log.debug("verified: %s", package)
    return True


# ----------------------------------------------------------------------------
# SDK paths


def get_sdk_path(sdk_name: str) -> Path:
    """Read an SDK path from an environment variable.

    Args:
        sdk_name: Name of the environment variable holding the SDK path

    Returns:
        Path to the SDK root

    Raises:
        MissingVariableError: If the variable is unset or empty
        PathNotFoundError: If the path does not exist

    Example:
        sdk_path = get_sdk_path("THE_SDK")
    """
    value = os.environ.get(sdk_name)
    if not value:
        raise MissingVariableError(
            f"{sdk_name} env variable configuration error: variable is not set"
        )

    sdk_path = Path(value).expanduser()
    if not sdk_path.exists():
        raise PathNotFoundError(
            f"SDK path {sdk_path} from {sdk_name} does not exist. "
            f"Please download & unpack the SDK into {sdk_path}"
        )
    return sdk_path


class IncludeDirFormat(Enum):
    """Output format of get_sdk_include_dirs()."""

    PLAIN = "plain"
    CLANG = "clang"


def get_sdk_include_dirs(
    sdk_header_dirs: Iterable[Pathlike],
    sdk_path: Pathlike,
    format: IncludeDirFormat = IncludeDirFormat.PLAIN,
    case_sensitive: bool = False,
) -> list[str]:
    """Return an expanded list of header directories from glob patterns.

    Relative patterns are anchored at sdk_path; absolute ones are used as
    they are. Only directories are collected, and the walk never leaves
    the directory named by the pattern's wildcard-free prefix. That
    prefix, and sdk_path itself, are looked up literally, so
    case_sensitive only affects what lies below it. A trailing `/**`
    also yields the prefix directory. The result keeps the order in
    which directories are first seen and contains no duplicates.

    Args:
        sdk_header_dirs: Iterable of glob patterns for directories to include
        sdk_path: Root SDK path
        format: IncludeDirFormat.PLAIN for plain paths, or
            IncludeDirFormat.CLANG for `-I<dir>` flags
        case_sensitive: Whether wildcard matching is case sensitive

    Returns:
        List of include directories in the requested format

    Raises:
        PathNotFoundError: If sdk_path is not an existing directory

    Example:
        sdk_path = get_sdk_path("THE_SDK")
        get_sdk_include_dirs(["headers/common/**"], sdk_path, IncludeDirFormat.CLANG)
    """
    sdk = Path(sdk_path)
    if not sdk.is_dir():
        raise PathNotFoundError(f"SDK path does not exist: {sdk}")

    seen: set[str] = set()
    incl_dirs = []

    for hdir in sdk_header_dirs:
        prefix, rest = _split_literal_prefix(str(hdir))
        # an absolute prefix replaces the SDK root
        base = sdk / prefix
        if not base.is_dir():
            continue
        found = []
        if all(part == "**" for part in rest.split("/") if part):
            # "dir/**" includes "dir" itself
            found.append(base)
        if rest:
            found.extend(
                match_files(
                    base,
                    rest,
                    case_sensitive=case_sensitive,
                    anchored=True,
                    include_files=False,
                    include_dirs=True,
                )
            )

        for path in found:
            key = str(path)
            if key in seen:
                continue
            seen.add(key)
            if format is IncludeDirFormat.CLANG:
                incl_dirs.append(f"-I{key}")
            else:
                incl_dirs.append(key)

    return incl_dirs


# ----------------------------------------------------------------------------
# Manifest


class Manifest:
    """Package name and version read from a TOML manifest."""

    def __init__(self, name: str, version: str | None, path: Path):
        self.name = name
        self.version = version
        self.path = path

    def __repr__(self) -> str:
        return (
            f"Manifest(name={self.name!r}, version={self.version!r}, "
            f"path={str(self.path)!r})"
        )


def find_manifest(start: Pathlike | None = None) -> Path:
    """Find the project manifest in start or one of its parents.

    Raises:
        ManifestError: If no manifest file is found
    """
    start_path = Path(start) if start else Path.cwd()
    for directory in [start_path, *start_path.resolve().parents]:
        for filename in MANIFEST_FILES:
            candidate = directory / filename
            if candidate.is_file():
                return candidate
    raise ManifestError(
        f"No manifest ({', '.join(MANIFEST_FILES)}) found from {start_path}"
    )


def read_manifest(path: Pathlike | None = None) -> Manifest:
    """Read the package name and version from a manifest file.

    The name is looked up in `[project]`, `[tool.poetry]` and `[package]`,
    the first table carrying one wins. A version that is not a plain
    string (`version.workspace = true`, dynamic versions) is treated as
    absent.

    Args:
        path: Path to the manifest; defaults to `[manifest] path` from the
            config file, then to find_manifest()

    Returns:
        The parsed Manifest

    Raises:
        ManifestError: If the file is missing, invalid or has no name
    """
    if path is None:
        path = get_config_value(get_config(), "manifest", "path")
    manifest_path = Path(path) if path else find_manifest()

    try:
        with open(manifest_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest not found: {manifest_path}") from e
    except OSError as e:
        raise ManifestError(
            f"Cannot read manifest {manifest_path}: {e}"
        ) from e
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Invalid manifest {manifest_path}: {e}") from e

    for keys in MANIFEST_TABLES:
        table: object = data
        for key in keys:
            table = table.get(key, {}) if isinstance(table, dict) else {}
        if not isinstance(table, dict):
            continue
        name = table.get("name")
        if isinstance(name, str) and name:
            version = table.get("version")
            if not isinstance(version, str):
                version = None
            return Manifest(name, version, manifest_path)

    raise ManifestError(f"No package name found in {manifest_path}")


def title_case(name: str) -> str:
    """Format a package name in title case.

    Words are separated by `-`, `_`, `.`, whitespace and camelCase
    boundaries. Each word gets an upper case first letter and a lower
    case remainder; digits stay part of their word.

    Examples:
        my-package   -> My Package
        myHTTPServer -> My Http Server
        lib2_foo     -> Lib2 Foo
        3d-tools     -> 3d Tools
    """
    words = []
    for chunk in WORD_SEPARATORS.split(name):
        if chunk:
            words.extend(_split_humps(chunk))
    return " ".join(word[0].upper() + word[1:].lower() for word in words)


def _split_humps(chunk: str) -> list[str]:
    """Split a separator-free chunk at camelCase and acronym boundaries."""
    words = []
    start = 0
    for i in range(1, len(chunk)):
        if not chunk[i].isupper():
            continue
        prev = chunk[i - 1]
        following = chunk[i + 1 : i + 2]
        if (
            prev.islower()
            or prev.isdigit()
            or (prev.isupper() and following.islower())
        ):
            words.append(chunk[start:i])
            start = i
    words.append(chunk[start:])
    return words


def get_package_name(
    manifest_path: Pathlike | None = None, with_version: bool = False
) -> str:
    """Return the manifest's package name in title case.

    Args:
        manifest_path: Path to the manifest (see read_manifest)
        with_version: Append the version, separated by a space

    Returns:
        e.g. "My Package" or "My Package 1.2.3"

    Raises:
        ManifestError: If the manifest cannot be read, or the version is
            requested but not present
    """
    manifest = read_manifest(manifest_path)
    name = title_case(manifest.name)
    if with_version:
        if not manifest.version:
            raise ManifestError(f"No package version found in {manifest.path}")
        name += VERSION_SEPARATOR + manifest.version
    return name


# ----------------------------------------------------------------------------
# Packed version numbers


def encode_version(version_string: str) -> int:
    """Pack a `MAJOR.MINOR.PATCH[-PRE]` version into a single integer.

    Layout: major in bits 19-21, minor in 15-18, patch in 11-14 and a
    numeric pre-release in 0-8. Each field is masked to its width; a
    non-numeric pre-release counts as 0 and build metadata is ignored.

    Raises:
        ValueError: If major, minor or patch is not a number
    """
    core, _, pre = version_string.split("+", 1)[0].partition("-")
    fields = core.split(".")
    major, minor, patch = (fields + ["0", "0"])[:3]
    pre_number = int(pre) if pre.isdigit() else 0
    return (
        ((int(major) & 7) << 19)
        | ((int(minor) & 15) << 15)
        | ((int(patch) & 15) << 11)
        | (pre_number & 511)
    )


def version() -> int:
    """Return this library's version packed with encode_version()."""
    return encode_version(__version__)
