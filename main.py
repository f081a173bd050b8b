import argparse
import logging
import sys
from pathlib import Path

root = Path(__file__).resolve().parent
sys.path.insert(0, str(root))

from config import ChangelogConfig, load_config
from notes_parser import parse_markdown
from releases import (
    load_releases,
    normalize_body,
    prepare_releases,
    render_changelog,
    summarize_releases,
)
from render import render_document


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    # Diagnostics go to stderr so stdout stays a clean changelog.
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT, handlers=handlers, force=True)


def format_summary(types: list, modules: list) -> str:
    return "\n".join(["-------------", "Summary:", f"Types {types!r}", f"Modules {modules!r}"])


def _emit(text: str, output: str | None) -> None:
    if output:
        out_path = Path(output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        logging.getLogger(__name__).info("Wrote %s", out_path)
    else:
        print(text)


def _run_render(args: argparse.Namespace, replacements: list[tuple[str, str]]) -> int:
    notes_path = Path(args.notes)
    if not notes_path.exists():
        raise FileNotFoundError(f"Missing notes file: {notes_path}")
    body = normalize_body(notes_path.read_text(encoding="utf-8"), replacements)
    _emit(render_document(parse_markdown(body)), args.output)
    return 0


def _run_changelog(args: argparse.Namespace, config: ChangelogConfig) -> int:
    logger = logging.getLogger(__name__)
    releases = prepare_releases(
        load_releases(Path(args.releases)),
        include_drafts=args.include_drafts or config.include_drafts,
        tag_prefix=config.tag_prefix,
    )
    logger.info("Rendering %s releases from %s", len(releases), args.releases)
    text = render_changelog(releases, config.replacements)
    if config.summary and not args.no_summary:
        summary = summarize_releases(releases, config.replacements)
        text = f"{text}\n{format_summary(summary.types, summary.modules)}"
    _emit(text, args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Normalize freeform release notes into a canonical changelog.")
    parser.add_argument("--config", help="Optional YAML config (see release_notes.yaml)")
    parser.add_argument("--output", help="Write the result to this path instead of stdout")
    parser.add_argument("--log-file", help="Also write log records to this file")
    parser.add_argument("--include-drafts", action="store_true", help="Keep draft releases in the changelog")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser("render", help="Render one release-notes markdown file")
    render_parser.add_argument("notes", help="Markdown file with release notes")

    changelog_parser = subparsers.add_parser("changelog", help="Compose a changelog from exported releases")
    changelog_parser.add_argument("releases", help="JSON or YAML list of releases")
    changelog_parser.add_argument("--no-summary", action="store_true", help="Skip the types/modules summary")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as exc:
        setup_logging()
        logging.getLogger(__name__).error("%s", exc)
        return 2
    setup_logging(config.log_level, Path(args.log_file) if args.log_file else None)

    try:
        if args.command == "render":
            return _run_render(args, config.replacements)
        return _run_changelog(args, config)
    except (FileNotFoundError, ValueError) as exc:
        logging.getLogger(__name__).error("%s", exc)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
