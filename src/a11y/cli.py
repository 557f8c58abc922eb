import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List

from dotenv import load_dotenv
from rich.console import Console
from rich.text import Text

from core.analyzer import get_registry
from core.config import Config, load_config, merge_env_config
from core.errors import A11yError, ConfigurationError
from core.logging import setup_logging
from core.models import AnalysisResult
from core.severity import get_impact_color, score_label, sort_by_impact, summarize_by_impact
from core.storage import ResultStore
from crawler.scheduler import analyze_sync, crawl_sync, resolve_scope

# Load .env if present
load_dotenv()

logger = logging.getLogger("portal_a11y")


def _build_report(results: List[AnalysisResult]) -> Dict[str, Any]:
    pages = []
    for result in results:
        entry = result.to_dict()
        entry["violations"] = [v.to_dict() for v in sort_by_impact(result.violations)]
        entry["impact_summary"] = summarize_by_impact(result.violations)
        entry["label"] = score_label(result.violations)
        pages.append(entry)
    return {"pages": pages, "total_pages": len(pages)}


def _pretty_print_report(report: Dict[str, Any], console: Console) -> None:
    """One line per page, then its violations most severe first."""
    for page in report["pages"]:
        console.print(Text(f"{page['url']}: {len(page['violations'])} violations ({page['label']})", style="bold"))
        for v in page["violations"]:
            console.print(Text.assemble(
                f"  - {v['id']} ",
                (f"[{v['impact']}]", get_impact_color(v["impact"])),
                f": {v['help'] or v['description']} ({len(v['nodes'])} nodes)",
            ))


def _apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Command-line values take precedence over file and environment."""
    if args.max_depth is not None:
        config.crawl.max_depth = args.max_depth
    if args.namespace_marker:
        config.crawl.namespace_marker = args.namespace_marker
    if args.exclude_paths:
        config.crawl.excluded_paths = [p.strip() for p in args.exclude_paths.split(',') if p.strip()]
    if args.timeout is not None:
        config.crawl.timeout = args.timeout
    if args.exclude_rules:
        config.audit.exclude = [r.strip() for r in args.exclude_rules.split(',') if r.strip()]
    if args.save_db:
        config.database.path = args.save_db
    if args.format:
        config.output.format = args.format
    if args.output:
        config.output.path = args.output
    return config


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Crawl a portal section and audit each page for accessibility violations",
        epilog="Examples:\n  portal-a11y --url https://www.zaragoza.es/sede/portal/etopia --crawl --max-depth 1\n  portal-a11y --url https://example.org/page --format json",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--url", help="URL of the page to analyze, or the seed URL with --crawl")
    parser.add_argument("--crawl", action="store_true", help="Crawl the portal section of --url and analyze every page")
    parser.add_argument("--max-depth", type=int, help="Maximum link depth for --crawl (default 2)")
    parser.add_argument("--namespace-marker", help="Path token preceding the portal name (default 'portal')")
    parser.add_argument("--exclude-paths", help="Comma-separated sub-paths never crawled (default '/servicio/')")
    parser.add_argument("--timeout", type=float, help="Per-page fetch timeout in seconds")
    parser.add_argument("--config", help="Path to YAML or JSON config file")
    parser.add_argument("--output", help="Write output to this file (default stdout)")
    parser.add_argument("--format", choices=["json", "pretty"], help="Output format (json or pretty)")
    parser.add_argument("--save-db", help="Save new results to the SQLite database at this path")
    parser.add_argument("--exclude-rules", help="Comma-separated rule ids to skip (e.g., 'color-contrast,image-alt')")
    parser.add_argument("--list-rules", action="store_true", help="List available rules and exit")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--quiet", action="store_true", help="Only output essential information")
    args = parser.parse_args(argv)

    try:
        config = merge_env_config(load_config(args.config))
    except Exception as e:
        print(f"Failed to load config {args.config}: {e}", file=sys.stderr)
        return 2
    config = _apply_args(config, args)

    # logging via centralized setup (uses rich unless disabled)
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    if args.quiet:
        level = logging.WARNING
    use_rich = os.environ.get("USE_RICH_LOGGER", "1") not in ("0", "false", "False")
    setup_logging(level=level, use_rich=use_rich)

    if args.list_rules:
        print("Available rules:")
        for name, analyzer in get_registry().list().items():
            print(f"  {name}: {analyzer.description}")
        return 0

    if not args.url:
        parser.error("--url is required")

    try:
        if args.crawl:
            # surface a bad seed before any traversal starts
            resolve_scope(args.url, config)
            results = crawl_sync(args.url, config.crawl.max_depth, config=config)
        else:
            results = [analyze_sync(args.url, config=config)]
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except A11yError as e:
        print(f"Failed to analyze page: {e}", file=sys.stderr)
        return 2

    if config.database.path:
        store = ResultStore(config.database.path)
        inserted = store.persist_new(results)
        logger.info("Saved %d new result(s) to %s (%d already stored)",
                    len(inserted), config.database.path, len(results) - len(inserted))

    report = _build_report(results)
    if config.output.format == 'json':
        out = json.dumps(report, indent=2)
        if config.output.path:
            with open(config.output.path, 'w', encoding='utf-8') as f:
                f.write(out)
        else:
            print(out)
    elif config.output.path:
        with open(config.output.path, 'w', encoding='utf-8') as f:
            _pretty_print_report(report, Console(file=f, soft_wrap=True, highlight=False))
    else:
        _pretty_print_report(report, Console(soft_wrap=True, highlight=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
