"""Dashboard entry point.

Usage:
    python run_dashboard.py                          # serve from cache when possible
    python run_dashboard.py --refresh                # force a fresh fetch
    python run_dashboard.py --fact-check "TEXT" [--source URL] [--save]
    python run_dashboard.py --generate TOPIC [--style S --tone T --format F --key-points K] [--save]
    python run_dashboard.py --library [ALL|CONTENT|REPORT]
    python run_dashboard.py --delete ID

Without an action flag, loads config.yaml, renders the news and trend views
with the configured view parameters, prints them, and exports both views to CSV.
"""

import argparse
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

load_dotenv()  # must precede meridian imports so env vars are available at module load

from meridian.core.config import load_config  # noqa: E402
from meridian.core.logger import configure_logging, logger  # noqa: E402
from meridian.models.datatypes import (  # noqa: E402
    ContentConfig, VerificationResult, ALL_ITEMS, ITEM_CONTENT, ITEM_REPORT,
)
from meridian.pipeline.engine import DashboardEngine, view_params_from_config  # noqa: E402


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run_dashboard",
        description="Render the Meridian news and trend dashboard.",
    )
    parser.add_argument("--refresh", action="store_true", help="Ignore cached batches and fetch again.")

    actions = parser.add_mutually_exclusive_group()
    actions.add_argument("--fact-check", metavar="TEXT", help="Fact-check a piece of text.")
    actions.add_argument("--generate", metavar="TOPIC", help="Draft content about a topic.")
    actions.add_argument(
        "--library",
        nargs="?",
        const=ALL_ITEMS,
        type=str.upper,
        choices=[ALL_ITEMS, ITEM_CONTENT, ITEM_REPORT],
        help="List saved items, optionally of one type.",
    )
    actions.add_argument("--delete", metavar="ID", help="Delete a saved item.")

    parser.add_argument("--source", default=None, help="Reference source for --fact-check.")
    parser.add_argument("--style", default="", help="Writing style for --generate.")
    parser.add_argument("--tone", default="", help="Tone for --generate.")
    parser.add_argument("--format", default="", help="Output format for --generate.")
    parser.add_argument("--key-points", default="", help="Points --generate must cover.")
    parser.add_argument("--save", action="store_true", help="Save the fact check or draft to the library.")
    return parser


def _print_report(result: VerificationResult) -> None:
    print(f"FACT CHECK [{result.status}] score {result.score:.0f}/100")
    print(f"  {result.analysis}")
    for correction in result.corrections:
        print(f"  - {correction}")


def _print_library(engine: DashboardEngine, kind: str) -> None:
    items = engine.library.filter(kind)
    print(f"LIBRARY ({kind}, {len(items)} items)")
    for item in items:
        tags = ", ".join(item.tags)
        print(f"  {item.id} | {item.type:<7} | {item.created_at[:19]} | {item.title} [{tags}]")


def _print_dashboard(engine: DashboardEngine, config: dict, refresh: bool) -> None:
    news_params, trend_params = view_params_from_config(config)
    snapshot = engine.run(news_params, trend_params, refresh=refresh)

    if snapshot.strategy:
        print(f"STRATEGY [{snapshot.strategy.market_mood}] {snapshot.strategy.headline}")
        for action in snapshot.strategy.action_items:
            print(f"  - {action}")

    print(f"\nNEWS ({news_params.sort_mode}, {len(snapshot.news)} items)")
    for ranked in snapshot.news:
        print(
            f"  {ranked.relative_label:>9} | hot {ranked.hot_score:4.1f} | "
            f"seo {ranked.seo_score:3d} | {ranked.item.title}"
        )

    print(f"\nTRENDS ({trend_params.sort_mode}, {len(snapshot.trends)} items)")
    for trend in snapshot.trends:
        print(f"  #{trend.rank} {trend.keyword:<16} {trend.mentions:>8} {trend.sentiment:<8} {trend.change:+g}%")

    logger.info(
        f"run_dashboard: completed, {len(snapshot.news)} news, {len(snapshot.trends)} trends"
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one command. Returns 0 on success, 1 on config failure or unknown library id."""
    args = _build_parser().parse_args(argv)

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        logger.error(f"run_dashboard: failed to load config: {exc}")
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    configure_logging(config)
    engine = DashboardEngine(config=config)

    if args.delete:
        if not engine.library.delete(args.delete):
            print(f"ERROR: no saved item with id {args.delete}", file=sys.stderr)
            return 1
        print(f"Deleted {args.delete}")
    elif args.library:
        _print_library(engine, args.library)
    elif args.fact_check:
        _print_report(engine.check_facts(args.fact_check, args.source, save=args.save))
    elif args.generate:
        brief = ContentConfig(
            topic=args.generate,
            style=args.style,
            tone=args.tone,
            format=args.format,
            key_points=args.key_points,
        )
        print(engine.draft_content(brief, save=args.save))
    else:
        _print_dashboard(engine, config, args.refresh)
    return 0


if __name__ == "__main__":
    sys.exit(main())
