#!/usr/bin/env python3
"""
Keyword Gap Analysis Runner

Runs the keyword gap engine for one domain against its competitors:
1. Load keyword records (JSON file) or collect them from DataForSEO
2. Run the strategy chain (direct -> intersection -> AI estimate -> mock)
3. Print the top opportunities and optionally write all gaps to JSON

Usage:
    # Optional credentials (strategies without them are skipped):
    export DATAFORSEO_LOGIN=your_login
    export DATAFORSEO_PASSWORD=your_password
    export ANTHROPIC_API_KEY=your_key

    # Run analysis:
    python scripts/run_gap_analysis.py example.com rival.com other.com

    # With options:
    python scripts/run_gap_analysis.py example.com rival.com \
        --keywords records.json \
        --per-competitor 25 \
        --strategies direct,mock \
        --output gaps.json

The keywords file is either a list of merged records or
{"primary": [...], "competitors": [{"domain": ..., "keywords": [...]}]}.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def load_keyword_file(path: str, domain: str):
    """Read merged records, or raw per-domain lists that still need merging."""
    from gapscope.gaps import merge_keyword_data

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, list):
        return data

    return merge_keyword_data(
        domain,
        data.get("primary") or [],
        data.get("competitors") or [],
    )


async def run_gap_analysis(
    domain: str,
    competitors: list,
    keywords_file: str = None,
    location_code: int = None,
    per_competitor: int = None,
    strategies: list = None,
    output: str = None,
    top: int = 15,
) -> int:
    """Run the gap engine and report results. Returns a process exit code."""

    load_dotenv()

    from gapscope.gaps import (
        AllStrategiesExhausted,
        GapAnalysisError,
        KeywordGapAnalyzer,
        collect_keyword_records,
        ranked_view,
        summarize_gaps,
    )
    from gapscope.utils import get_settings

    settings = get_settings()
    location = location_code or settings.DEFAULT_LOCATION_CODE

    print(f"\n{'='*70}")
    print("GAPSCOPE - KEYWORD GAP ANALYSIS")
    print(f"{'='*70}")
    print(f"Domain:         {domain}")
    print(f"Competitors:    {', '.join(competitors)}")
    print(f"Location:       {location}")
    print(f"Per competitor: {per_competitor or settings.GAPS_PER_COMPETITOR}")
    print(f"DataForSEO:     {'configured' if settings.has_dataforseo else 'not configured'}")
    print(f"Claude:         {'configured' if settings.has_anthropic else 'not configured'}")
    print(f"{'='*70}\n")

    async with KeywordGapAnalyzer.from_settings(settings) as analyzer:
        records = []
        try:
            if keywords_file:
                records = load_keyword_file(keywords_file, domain)
                print(f"✓ Loaded {len(records)} keyword records from {keywords_file}")
            elif analyzer.intersection_provider is not None:
                records = await collect_keyword_records(
                    analyzer.intersection_provider.client,
                    domain,
                    competitors,
                    location_code=location,
                    language_code=settings.DEFAULT_LANGUAGE,
                )
                print(f"✓ Collected {len(records)} keyword records from DataForSEO")
        except (OSError, json.JSONDecodeError) as e:
            print(f"✗ Could not read keywords file: {e}")
            return 1
        except GapAnalysisError as e:
            logger.warning(f"Keyword collection failed: {e}")
            print(f"⚠ Keyword collection failed, continuing without records: {e}")

        try:
            result = await analyzer.analyze(
                domain,
                competitors,
                records,
                target_gap_count=per_competitor,
                strategy_order=strategies,
                location_code=location,
            )
        except AllStrategiesExhausted as e:
            print(f"✗ {e}")
            for name, reason in e.failures:
                print(f"  - {name}: {reason}")
            return 1
        except (GapAnalysisError, ValueError) as e:
            print(f"✗ {e}")
            return 1

    summary = summarize_gaps(result.gaps)

    print(f"\n✓ Strategy:   {result.strategy.value} (provenance: {result.provenance})")
    print(f"✓ Total gaps: {summary['total']}")
    for comp, count in summary["by_competitor"].items():
        print(f"  - {comp}: {count}")
    for name, reason in result.failures:
        print(f"  ⚠ {name} skipped: {reason}")
    if result.is_illustrative:
        print("\n⚠ PLACEHOLDER DATA - these gaps are randomly generated, not real rankings")

    print(f"\n{'Keyword':<40} {'Competitor':<22} {'Vol':>7} {'KD':>4} {'Rank':>5} {'Tier':<7}")
    print("-" * 90)
    for gap in ranked_view(result.gaps)[:top]:
        marker = "★" if gap.is_top_opportunity else " "
        print(
            f"{marker}{gap.keyword[:39]:<39} {(gap.competitor or gap.keyword_type.value)[:22]:<22} "
            f"{gap.volume:>7} {gap.difficulty:>4.0f} {gap.rank if gap.rank is not None else '-':>5} "
            f"{gap.opportunity.value:<7}"
        )

    if output:
        output_path = Path(output)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump({**result.to_dict(), "summary": summary}, f, indent=2)
        print(f"\n✓ Wrote {len(result.gaps)} gaps to {output_path}")

    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Run keyword gap analysis for a domain against its competitors"
    )
    parser.add_argument("domain", help="Primary domain (e.g., example.com)")
    parser.add_argument("competitors", nargs="+", help="Competitor domains")
    parser.add_argument("--keywords", help="JSON file with keyword records")
    parser.add_argument("--location", type=int, default=None, help="DataForSEO location code (default: 2840)")
    parser.add_argument("--per-competitor", type=int, default=None, help="Gaps kept per competitor (default: 50)")
    parser.add_argument(
        "--strategies",
        default=None,
        help="Comma-separated strategy order (direct,dataforseo_intersection,ai_estimate,mock)",
    )
    parser.add_argument("--output", help="Write all gaps to this JSON file")
    parser.add_argument("--top", type=int, default=15, help="Rows to print (default: 15)")

    args = parser.parse_args()

    strategies = [s.strip() for s in args.strategies.split(",") if s.strip()] if args.strategies else None

    exit_code = asyncio.run(run_gap_analysis(
        domain=args.domain,
        competitors=args.competitors,
        keywords_file=args.keywords,
        location_code=args.location,
        per_competitor=args.per_competitor,
        strategies=strategies,
        output=args.output,
        top=args.top,
    ))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
