#!/usr/bin/env python3
"""
Quick CLI runner for the Voice of Customer Analyzer.

Usage:
    python run.py                                   # Demo analysis for "Acme" on Twitter
    python run.py --company Nubank --platform reddit
    python run.py --mode api                        # Start FastAPI server
    python run.py --mode dashboard                  # Start Streamlit dashboard
"""

import sys
import os
import argparse
import logging

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("run")


def demo(company_name: str, platform_value: str):
    """Run one analysis, persist it and print the report."""
    from agents.metrics import EmptyBatchError
    from db import crud
    from db.database import get_db, init_db
    from models.schemas import Platform
    from utils.pipeline import PipelineError, run_analysis

    init_db()
    platform = Platform(platform_value)

    print("\n" + "="*70)
    print(f"  🗣️  VOICE OF CUSTOMER — {company_name} on {platform.display_name}")
    print("="*70 + "\n")

    try:
        report = run_analysis(company_name, platform)
    except EmptyBatchError:
        print(f"\n❌ No {platform.content_noun} found for analysis")
        sys.exit(1)
    except PipelineError as e:
        print(f"\n❌ Pipeline failed: {e}")
        sys.exit(1)

    with get_db() as db:
        record = crud.create_analysis(db, crud.get_or_create_company(db, company_name), report)
        analysis_id = record.analysis_id

    m = report.metrics
    source = "REAL" if report.is_real_data else "SIMULATED"
    print(f"  Data source:     {source} ({report.api_status})")
    if report.error_message:
        print(f"  Note:            {report.error_message}")
    print(f"  Mentions:        {m.total_tweets} "
          f"(+{m.positive_tweets} / -{m.negative_tweets} / ={m.neutral_tweets})")
    print(f"  Sentiment score: {m.sentiment_score:.2f}")
    print(f"  Engagement rate: {m.engagement_rate:.2%}")
    print(f"  Reach estimate:  {m.reach_estimate:,}")
    print(f"  Top topics:      {', '.join(report.top_topics) or '-'}")

    print("\n" + "─"*70)
    print("  🥊 COMPETITORS (simulated)")
    print("─"*70)
    for comp in report.competitors:
        print(f"   {comp.name:<24} score {comp.sentiment_score:.2f}  "
              f"mentions {comp.total_mentions:<4} engagement {comp.engagement_rate:.2%}")

    print("\n" + "─"*70)
    print("  💡 INSIGHTS")
    print("─"*70)
    for insight in report.insights:
        print(f"   • {insight}")

    print("\n" + "="*70)
    print(f"  ✅ Saved as analysis #{analysis_id}")
    print(f"  🌐 Start dashboard: streamlit run dashboard/app.py")
    print(f"  🔌 Start API:       uvicorn api.main:app --reload --port 8000")
    print("="*70 + "\n")


def start_api():
    import uvicorn
    from config.settings import settings
    uvicorn.run(
        "api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
    )


def start_dashboard():
    import subprocess
    subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        os.path.join(os.path.dirname(__file__), "dashboard", "app.py"),
        "--server.port", "8501",
    ])


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Voice of Customer Analyzer")
    parser.add_argument(
        "--mode",
        choices=["demo", "api", "dashboard"],
        default="demo",
        help="Run mode: demo | api | dashboard",
    )
    parser.add_argument("--company", default="Acme", help="Company or brand to analyze (demo mode)")
    parser.add_argument(
        "--platform",
        choices=["twitter", "reddit"],
        default="twitter",
        help="Platform to search (demo mode)",
    )
    args = parser.parse_args()

    if args.mode == "demo":
        company = args.company.strip()
        if not company:
            parser.error("--company must not be blank")
        demo(company, args.platform)
    elif args.mode == "api":
        start_api()
    elif args.mode == "dashboard":
        start_dashboard()
