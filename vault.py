"""Read publishable notes from a local Obsidian vault."""

from __future__ import annotations

import logging
import posixpath
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import yaml

from models import Record

LOGGER = logging.getLogger(__name__)

# Front-matter `type` values that mark a note as a table entry.
VALID_TYPES: tuple[str, ...] = ("tool", "link", "library", "dataset")
TEMPLATES_DIR = "Templates/"
DESCRIPTION_MARKER = "## Link: "

_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)
_WIKI_LINK_RE = re.compile(r"!?\[\[([^\[\]]+?)\]\]")
_MARKDOWN_LINK_RE = re.compile(r"!?\[[^\]]*\]\(([^)\s]+)(?:\s+\"[^\"]*\")?\)")
_URL_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """A note as read from the vault, before mapping to a Record."""

    path: str
    name: str
    front_matter: dict[str, Any] = field(default_factory=dict)
    content: str = ""
    linked_names: tuple[str, ...] = ()


class LinkIndex:
    """Resolves note links to vault files the way Obsidian does.

    Path-qualified links match by path suffix. Bare names match by file name,
    case-insensitively, preferring the linking note's folder and then the
    shortest path.
    """

    def __init__(self, paths: Iterable[str]) -> None:
        self._paths = sorted(paths)
        self._by_path = {path.lower(): path for path in self._paths}
        self._by_name: dict[str, list[str]] = {}
        for path in self._paths:
            self._by_name.setdefault(posixpath.basename(path).lower(), []).append(path)

    def resolve(self, link: str, source_path: str) -> str | None:
        target = link.strip()
        if not target:
            return None
        source_dir = posixpath.dirname(source_path).lower()
        candidates = [target] if target.lower().endswith(".md") else [target, f"{target}.md"]
        for candidate in candidates:
            found = self._lookup(candidate.lower(), source_dir)
            if found is not None:
                return found
        return None

    def linked_paths(self, content: str, source_path: str) -> list[str]:
        """Resolved link targets in ``content``, deduplicated, in order of appearance."""
        resolved: list[str] = []
        for link in _iter_links(content):
            path = self.resolve(link, source_path)
            if path is not None and path not in resolved:
                resolved.append(path)
        return resolved

    def _lookup(self, candidate: str, source_dir: str) -> str | None:
        if candidate.startswith(("./", "../")):
            return self._by_path.get(posixpath.normpath(posixpath.join(source_dir, candidate)))
        if "/" in candidate:
            candidate = candidate.lstrip("/")
            exact = self._by_path.get(candidate)
            if exact is not None:
                return exact
            matches = [path for path in self._paths if path.lower().endswith(f"/{candidate}")]
        else:
            matches = self._by_name.get(candidate, [])
        return _pick_closest(matches, source_dir)


def collect_records(root: str | Path) -> list[Record]:
    """Read the vault and return a Record for every publishable note."""
    documents = read_vault(root)
    records = [to_record(doc) for doc in documents if is_publishable(doc)]
    LOGGER.info("Vault scan: notes=%s publishable=%s", len(documents), len(records))
    return records


def read_vault(root: str | Path) -> list[SourceDocument]:
    """Read every Markdown note outside the templates folder, sorted by path."""
    root = Path(root)
    if not root.is_dir():
        raise RuntimeError(f"Vault directory not found: {root}")

    all_files = sorted(_iter_vault_files(root))
    index = LinkIndex(all_files)

    documents: list[SourceDocument] = []
    for rel_path in all_files:
        if not rel_path.lower().endswith(".md") or rel_path.startswith(TEMPLATES_DIR):
            continue
        try:
            content = (root / rel_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Vault scan: could not read %s, skipping: %s", rel_path, exc)
            continue

        front_matter, _ = split_front_matter(content)
        linked_names = tuple(_base_name(path) for path in index.linked_paths(content, rel_path))
        documents.append(
            SourceDocument(
                path=rel_path,
                name=_base_name(rel_path),
                front_matter=front_matter,
                content=content,
                linked_names=linked_names,
            )
        )
    return documents


def is_publishable(doc: SourceDocument) -> bool:
    return doc.front_matter.get("type") in VALID_TYPES


def to_record(doc: SourceDocument) -> Record:
    """Map a vault note to a Record. Tags are the names of the notes it links to."""
    return Record(
        name=doc.name,
        link=_as_text(doc.front_matter.get("link")),
        tags=doc.linked_names,
        description=extract_description(doc.content),
        type=_as_text(doc.front_matter.get("type")),
    )


def extract_description(content: str) -> str:
    """Return the text after the first ``## Link: `` line, or "" if there is none."""
    lines = content.split("\n")
    for index, line in enumerate(lines):
        if line.startswith(DESCRIPTION_MARKER):
            return "\n".join(lines[index + 1 :])
    return ""


def split_front_matter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front matter from the note body.

    Invalid or non-mapping front matter is treated as empty.
    """
    match = _FRONT_MATTER_RE.match(content)
    if not match:
        return {}, content

    body = content[match.end() :]
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        LOGGER.warning("Ignoring invalid front matter: %s", exc)
        return {}, body
    if not isinstance(data, dict):
        return {}, body
    return data, body


def _iter_links(content: str) -> Iterator[str]:
    found: list[tuple[int, str]] = []
    for match in _WIKI_LINK_RE.finditer(content):
        # [[target#heading|alias]] -> target
        target = match.group(1).split("|", 1)[0].split("#", 1)[0]
        found.append((match.start(), target))
    for match in _MARKDOWN_LINK_RE.finditer(content):
        raw = match.group(1)
        if raw.startswith("#") or _URL_SCHEME_RE.match(raw):
            continue
        found.append((match.start(), unquote(raw.split("#", 1)[0])))
    for _, target in sorted(found, key=lambda item: item[0]):
        if target.strip():
            yield target


def _iter_vault_files(root: Path) -> Iterator[str]:
    for path in root.rglob("*"):
        rel = path.relative_to(root)
        if any(part.startswith(".") for part in rel.parts):
            continue
        if path.is_file():
            yield rel.as_posix()


def _pick_closest(matches: list[str], source_dir: str) -> str | None:
    if not matches:
        return None
    for path in matches:
        if posixpath.dirname(path).lower() == source_dir:
            return path
    return min(matches, key=lambda path: (path.count("/"), path))


def _base_name(path: str) -> str:
    return posixpath.splitext(posixpath.basename(path))[0]


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""
