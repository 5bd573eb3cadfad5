# templates.py
# SPDX-License-Identifier: MIT
"""Reference license corpus bundled with the package.

Each asset is a plain text file laid out as::

    <ignored preamble>
    ---
    title: MIT License
    nickname: ...
    ---
    <license body>

Only the body is tokenized. The corpus order below is fixed because the
scorer breaks exact ties in favor of the first template seen.
"""

from __future__ import annotations

from collections.abc import Iterable
from importlib import resources

from .log import get_logger
from .normalize import normalize
from .records import Template

log = get_logger(__name__)

__all__ = [
    "CorpusLoadError",
    "TEMPLATE_FILES",
    "ASSETS_PACKAGE",
    "parse_template",
    "load_templates",
]

ASSETS_PACKAGE = "pkglicenses.assets"

TEMPLATE_FILES: tuple[str, ...] = (
    "afl_3.0.txt",
    "agpl_3.0.txt",
    "apache_2.0.txt",
    "artistic_2.0.txt",
    "bsd_2_clause.txt",
    "bsd_3_clause_clear.txt",
    "bsd_3_clause.txt",
    "cc0_1.0.txt",
    "epl_1.0.txt",
    "gpl_2.0.txt",
    "gpl_3.0.txt",
    "isc.txt",
    "lgpl_2.1.txt",
    "lgpl_3.0.txt",
    "mit.txt",
    "mpl_2.0.txt",
    "ms_pl.txt",
    "ms_rl.txt",
    "no_license.txt",
    "ofl_1.1.txt",
    "osl_3.0.txt",
    "unlicense.txt",
    "wtfpl.txt",
)

_PREAMBLE, _FRONT_MATTER, _BODY = range(3)


class CorpusLoadError(RuntimeError):
    """Raised when a bundled template cannot be read or parsed."""


def parse_template(content: str, name: str = "") -> Template:
    """Parse one template document.

    Args:
        content (str): Full asset text, front matter included.
        name (str): Asset name used in error messages.

    Returns:
        Template: Template with its title, nickname and body word set.

    Raises:
        CorpusLoadError: If the front matter block is missing or never
            closed.
    """
    title = ""
    nickname = ""
    body: list[str] = []
    state = _PREAMBLE
    for raw in content.splitlines():
        line = raw.strip()
        if state == _PREAMBLE:
            if line == "---":
                state = _FRONT_MATTER
        elif state == _FRONT_MATTER:
            if line == "---":
                state = _BODY
            elif line.startswith("title:"):
                title = line[len("title:"):].strip()
            elif line.startswith("nickname:"):
                nickname = line[len("nickname:"):].strip()
        else:
            body.append(raw)
    if state != _BODY:
        raise CorpusLoadError(f"template {name or '<string>'} has no closed front matter block")
    return Template(title=title, nickname=nickname, words=normalize("\n".join(body)), name=name)


def load_templates(
    names: Iterable[str] = TEMPLATE_FILES,
    *,
    package: str = ASSETS_PACKAGE,
) -> list[Template]:
    """Load the template corpus.

    Any unreadable or malformed template fails the whole load; there is no
    partial corpus.

    Args:
        names (Iterable[str]): Asset file names, in corpus order.
        package (str): Package holding the asset files.

    Returns:
        list[Template]: Parsed templates in the order of ``names``.

    Raises:
        CorpusLoadError: If any asset is missing, undecodable or malformed.
    """
    root = resources.files(package)
    templates: list[Template] = []
    for name in names:
        try:
            content = root.joinpath(name).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CorpusLoadError(f"cannot read template {name}: {exc}") from exc
        templates.append(parse_template(content, name))
    log.debug("Loaded %d license templates from %s", len(templates), package)
    return templates
