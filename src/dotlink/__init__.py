"""
dotlink - link centrally stored dotfiles into place.

dotlink reads a declarative YAML list of ``{path, origin}`` pairs and
symlinks each origin in your dotfiles directory to its destination path.
"""

__version__ = "0.1.0"
__license__ = "GPL-3.0-or-later"

from .core import (
    LinkConfig,
    LinkResult,
    LinkSpec,
    RunOptions,
    apply_links,
    expand_path,
    link_dotfiles,
    load_config,
    parse_config,
    resolve_run_options,
)

__all__ = [
    "LinkSpec",
    "LinkConfig",
    "LinkResult",
    "RunOptions",
    "expand_path",
    "resolve_run_options",
    "load_config",
    "parse_config",
    "apply_links",
    "link_dotfiles",
]
