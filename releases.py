import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from packaging.version import InvalidVersion, Version

from config import DEFAULT_REPLACEMENTS
from notes_parser import parse_markdown
from render import render_document


REQUIRED_FIELDS = ("tag_name", "published_at")


@dataclass
class Release:
    tag_name: str
    published_at: str
    body: str = ""
    draft: bool = False
    name: str | None = None


@dataclass
class ReleaseSummary:
    types: list[str | None] = field(default_factory=list)
    modules: list[str | None] = field(default_factory=list)


def _release_from_entry(entry: Any, index: int) -> Release:
    if not isinstance(entry, dict):
        raise ValueError(f"release #{index} is not an object")
    for key in REQUIRED_FIELDS:
        if not entry.get(key):
            raise ValueError(f"release #{index} is missing {key}")
    # Unquoted YAML scalars change meaning (1.10 -> 1.1), so tags must be strings.
    if not isinstance(entry["tag_name"], str):
        raise ValueError(f"release #{index} tag_name must be a string, got {type(entry['tag_name']).__name__}")
    published_at = entry["published_at"]
    if isinstance(published_at, date):
        published_at = published_at.isoformat()
    elif not isinstance(published_at, str):
        raise ValueError(f"release #{index} published_at must be a string or date, got {type(published_at).__name__}")
    body = entry.get("body")
    if body is not None and not isinstance(body, str):
        raise ValueError(f"release #{index} body must be a string, got {type(body).__name__}")
    draft = entry.get("draft", False)
    if not isinstance(draft, bool):
        raise ValueError(f"release #{index} draft must be a boolean, got {draft!r}")
    name = entry.get("name")
    if name is not None and not isinstance(name, str):
        raise ValueError(f"release #{index} name must be a string, got {type(name).__name__}")
    return Release(
        tag_name=entry["tag_name"],
        published_at=published_at,
        body=body or "",
        draft=draft,
        name=name,
    )


def load_releases(path: Path) -> list[Release]:
    """Read a release list exported from the hosting service (JSON or YAML)."""
    if not path.exists():
        raise FileNotFoundError(f"Missing releases file: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Unreadable releases file {path}: {exc}") from exc
    if not isinstance(data, list):
        raise ValueError(f"Releases file must hold a list: {path}")
    return [_release_from_entry(entry, index) for index, entry in enumerate(data)]


def prepare_releases(releases: list[Release], *, include_drafts: bool = False, tag_prefix: str = "v") -> list[Release]:
    # Strip tag prefixes, drop drafts, newest version first; unparseable tags go last.
    logger = logging.getLogger(__name__)
    prepared = []
    for release in releases:
        if release.draft and not include_drafts:
            logger.info("Skipping draft release %s", release.tag_name)
            continue
        tag = release.tag_name
        if tag_prefix and tag.startswith(tag_prefix):
            tag = tag[len(tag_prefix) :]
        prepared.append(Release(tag, release.published_at, release.body, release.draft, release.name))

    versioned: list[tuple[Version, Release]] = []
    unversioned: list[Release] = []
    for release in prepared:
        try:
            versioned.append((Version(release.tag_name), release))
        except InvalidVersion:
            logger.warning("Tag %s is not a valid version; ordering it after versioned releases", release.tag_name)
            unversioned.append(release)
    versioned.sort(key=lambda pair: pair[0], reverse=True)
    unversioned.sort(key=lambda release: release.tag_name, reverse=True)
    return [release for _, release in versioned] + unversioned


def normalize_body(body: str, replacements: list[tuple[str, str]] | None = None) -> str:
    for old, new in DEFAULT_REPLACEMENTS if replacements is None else replacements:
        body = body.replace(old, new)
    return body


def render_release(
    release: Release,
    replacements: list[tuple[str, str]] | None = None,
    diagnostics: list[str] | None = None,
) -> str:
    parsed = parse_markdown(normalize_body(release.body, replacements), diagnostics=diagnostics)
    return f"## {release.tag_name}\nReleased {release.published_at[:10]}\n\n{render_document(parsed)}"


def render_changelog(
    releases: list[Release],
    replacements: list[tuple[str, str]] | None = None,
    diagnostics: list[str] | None = None,
) -> str:
    return "\n".join(render_release(release, replacements, diagnostics) for release in releases)


def summarize_releases(releases: list[Release], replacements: list[tuple[str, str]] | None = None) -> ReleaseSummary:
    # Distinct types and modules in first-seen order, None included when a change had none.
    summary = ReleaseSummary()
    for release in releases:
        for change in parse_markdown(normalize_body(release.body, replacements)).changes:
            if change.type not in summary.types:
                summary.types.append(change.type)
            if change.module not in summary.modules:
                summary.modules.append(change.module)
    return summary
