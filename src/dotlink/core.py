"""Core functionality for dotlink - a declarative dotfiles symlinker."""

import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple

import typer
import yaml
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)

from .exceptions import (
    ApplyResultDict,
    ConfigParseError,
    ConfigReadError,
    DotfilesDirNotFoundError,
    HomeDirectoryError,
    LinkError,
    UnsupportedPlatformError,
)

# Constants
DEFAULT_DOTFILES_DIR = "~/.cfg"
DEFAULT_CONFIG_FILENAME = "symlinks.yml"
PROGRESS_THRESHOLD = 50  # Show progress bar for link lists with 50+ entries

# $HOME and ${HOME} in link paths, so they share the injected home with ~
_HOME_VAR = re.compile(r"\$(?:HOME\b|\{HOME\})")

# Global console instance
console = Console()


# ============================================================================
# DATA MODEL
# ============================================================================


@dataclass(frozen=True)
class LinkSpec:
    """One desired symlink: ``path`` is where it goes, ``origin`` what it names."""

    path: str
    origin: str


@dataclass(frozen=True)
class LinkConfig:
    """The parsed link list, in declaration order."""

    links: Tuple[LinkSpec, ...] = ()


@dataclass(frozen=True)
class RunOptions:
    """Resolved invocation parameters for a single run."""

    config_path: Path
    dotfiles_dir: Path
    home: Path


@dataclass(frozen=True)
class LinkResult:
    """Outcome of attempting one link."""

    spec: LinkSpec
    src: Path
    dest: Path
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ============================================================================
# PATH MANAGEMENT
# ============================================================================


def check_platform() -> None:
    """Refuse to run where POSIX symlinks are not available."""
    if os.name == "nt" or sys.platform.startswith("win"):
        raise UnsupportedPlatformError("Windows is not supported.")


def get_home_dir() -> Path:
    """Get the invoking user's home directory."""
    # $HOME wins over the passwd entry, as in a login shell
    if os.environ.get("HOME"):
        return Path(os.environ["HOME"])
    try:
        return Path.home()
    except (RuntimeError, KeyError) as e:
        raise HomeDirectoryError(
            f"Could not determine the home directory: {e}"
        ) from e


def expand_path(path: str, home: Path) -> Path:
    """
    Expand a leading ``~`` against ``home`` and substitute ``$VAR`` references.

    ``$HOME`` is taken from ``home`` as well; other variables come from the
    environment and undefined ones are left as written. ``~user`` forms are
    left untouched; only the invoking user's home is known.
    """
    if path == "~":
        return home
    if path.startswith("~/"):
        return home / _expand_vars(path[2:], home)
    return Path(_expand_vars(path, home))


def _expand_vars(value: str, home: Path) -> str:
    return os.path.expandvars(_HOME_VAR.sub(lambda _: str(home), value))


def get_source_path(dotfiles_dir: Path, origin: str) -> Path:
    """Join ``origin`` onto the dotfiles directory without expanding it."""
    return dotfiles_dir / origin


def resolve_run_options(
    config: str = DEFAULT_CONFIG_FILENAME,
    dotfiles_dir: str = DEFAULT_DOTFILES_DIR,
    home: Optional[Path] = None,
) -> RunOptions:
    """
    Build RunOptions from raw CLI values.

    The config path is resolved relative to the dotfiles directory, so an
    absolute ``config`` wins over ``dotfiles_dir``.
    """
    if home is None:
        home = get_home_dir()

    # Symlink targets are stored verbatim, so the source must be absolute
    resolved_dir = expand_path(dotfiles_dir, home).absolute()
    config_path = resolved_dir / expand_path(config, home)

    return RunOptions(config_path=config_path, dotfiles_dir=resolved_dir, home=home)


def ensure_dotfiles_dir(dotfiles_dir: Path) -> None:
    """Raise if the dotfiles directory is missing."""
    if not dotfiles_dir.is_dir():
        raise DotfilesDirNotFoundError(f"Missing dotfiles directory ({dotfiles_dir}).")


# ============================================================================
# CONFIGURATION LOADING
# ============================================================================


def read_config_file(config_path: Path) -> str:
    """Read the link list from disk."""
    if not config_path.exists():
        raise ConfigReadError(f"Missing config file ({config_path}).")

    try:
        return config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigReadError(f"Could not read config file {config_path}: {e}") from e


def _require_string(entry: Any, key: str, index: int) -> str:
    value = entry.get(key)
    if value is None:
        raise ConfigParseError(f"links[{index}].link is missing required key '{key}'")
    if not isinstance(value, str) or not value:
        raise ConfigParseError(
            f"links[{index}].link.{key} must be a non-empty string, got {value!r}"
        )
    return value


def parse_config(text: str, source: str = "<string>") -> LinkConfig:
    """
    Parse link list YAML into a LinkConfig.

    Expected shape::

        links:
          - link:
              path: ~/.zshrc
              origin: zshrc

    Unknown keys are ignored at every level.
    """
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML in {source}: {e}") from e

    if not isinstance(document, dict):
        raise ConfigParseError(f"{source} must contain a mapping with a 'links' key")
    if "links" not in document:
        raise ConfigParseError(f"{source} is missing required key 'links'")

    raw_links = document["links"]
    if not isinstance(raw_links, list):
        raise ConfigParseError(f"'links' in {source} must be a list")

    links: List[LinkSpec] = []
    for index, item in enumerate(raw_links):
        if not isinstance(item, dict) or "link" not in item:
            raise ConfigParseError(f"links[{index}] must be a mapping with a 'link' key")
        entry = item["link"]
        if not isinstance(entry, dict):
            raise ConfigParseError(f"links[{index}].link must be a mapping")

        links.append(
            LinkSpec(
                path=_require_string(entry, "path", index),
                origin=_require_string(entry, "origin", index),
            )
        )

    return LinkConfig(links=tuple(links))


def load_config(config_path: Path) -> LinkConfig:
    """Read and parse the link list at ``config_path``."""
    return parse_config(read_config_file(config_path), source=str(config_path))


# ============================================================================
# LINK APPLICATION
# ============================================================================


def resolve_link_paths(
    spec: LinkSpec, dotfiles_dir: Path, home: Path
) -> Tuple[Path, Path]:
    """Return ``(src, dest)`` for one entry."""
    return get_source_path(dotfiles_dir, spec.origin), expand_path(spec.path, home)


def create_link(src: Path, dest: Path) -> None:
    """Create ``dest`` as a symlink to ``src``. Never touches an existing ``dest``."""
    if not src.exists():
        raise LinkError(f"Path '{src}' does not exist. Skipping...")
    if not dest.parent.is_dir():
        raise LinkError(
            f"Cannot link to '{dest}' because its parent directory does not exist. "
            "Skipping..."
        )
    if not dest.name:
        raise LinkError(f"Invalid destination path '{dest}'. Skipping...")

    try:
        dest.symlink_to(src)
    except (OSError, ValueError) as e:
        raise LinkError(f"Failed to symlink {src} -> {dest}. {e}. Skipping...") from e


def report_result(result: LinkResult, quiet: bool = False) -> None:
    """Print one audit line; failures are shown even in quiet mode."""
    if result.ok:
        if not quiet:
            typer.secho(
                f"  ✓ Linked {result.dest} -> {result.src}", fg=typer.colors.GREEN
            )
        return

    typer.secho(
        f"  ! {result.error} (path: {result.spec.path}, origin: {result.spec.origin})",
        fg=typer.colors.YELLOW,
        err=True,
    )


def link_entry(
    spec: LinkSpec, dotfiles_dir: Path, home: Path, quiet: bool = False
) -> LinkResult:
    """Attempt one entry and report it. Per-entry failures are not raised."""
    src, dest = resolve_link_paths(spec, dotfiles_dir, home)
    try:
        create_link(src, dest)
        result = LinkResult(spec=spec, src=src, dest=dest)
    except LinkError as e:
        result = LinkResult(spec=spec, src=src, dest=dest, error=str(e))

    report_result(result, quiet=quiet)
    return result


def apply_links(
    config: LinkConfig,
    dotfiles_dir: Path,
    home: Path,
    quiet: bool = False,
    description: str = "Linking",
) -> List[LinkResult]:
    """
    Create every symlink in ``config``, in declaration order.

    A failed entry is reported and skipped; later entries are still attempted
    and links already created are left in place.
    """
    results: List[LinkResult] = []

    if not config.links:
        if not quiet:
            typer.secho("No links declared; nothing to do.", fg=typer.colors.YELLOW)
        return results

    if not quiet:
        typer.secho(
            f"Linking {len(config.links)} entries from {dotfiles_dir}...",
            fg=typer.colors.CYAN,
        )

    if quiet or len(config.links) < PROGRESS_THRESHOLD:
        for spec in config.links:
            results.append(link_entry(spec, dotfiles_dir, home, quiet=quiet))
        return results

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task(description, total=len(config.links))

        for spec in config.links:
            progress.update(task, description=f"{description} {spec.path}")
            results.append(link_entry(spec, dotfiles_dir, home, quiet=quiet))
            progress.advance(task)

    return results


def summarize_results(results: List[LinkResult]) -> ApplyResultDict:
    """Count created and failed links."""
    failed = sum(1 for result in results if not result.ok)
    return {"success": len(results) - failed, "failed": failed}


def link_dotfiles(options: RunOptions, quiet: bool = False) -> List[LinkResult]:
    """
    Run the whole pipeline for ``options``.

    Every fatal check happens before the first link is attempted.
    """
    ensure_dotfiles_dir(options.dotfiles_dir)
    config = load_config(options.config_path)
    return apply_links(config, options.dotfiles_dir, options.home, quiet=quiet)
