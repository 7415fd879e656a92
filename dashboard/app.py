"""
Streamlit Dashboard
Voice of Customer Analyzer

Sections:
  1. Sidebar: new analysis (company + platform)
  2. Report: KPIs, provenance, charts, topics, insights, mentions
  3. History: past analyses, open / delete / download
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd
from datetime import datetime
from typing import Any, Dict, Optional
import logging

from agents.fetcher import build_fetchers
from agents.metrics import EmptyBatchError
from config.settings import settings
from dashboard.charts import competitor_bar, engagement_bar, sentiment_pie
from db import crud
from db.database import get_db, init_db
from models.schemas import Platform
from utils.pipeline import PipelineError, run_analysis
from utils.report import render_report_html, report_filename

logger = logging.getLogger(__name__)

# ─── Page Config ─────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Voice of Customer Analyzer",
    page_icon="🗣️",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_fetchers():
    """Cache and rate limiters must outlive Streamlit reruns."""
    init_db()
    return build_fetchers(settings)


def get_state():
    if "analysis_id" not in st.session_state:
        st.session_state.analysis_id = None
    return st.session_state


def load_analysis(analysis_id: int) -> Optional[Dict[str, Any]]:
    with get_db() as db:
        analysis = crud.get_analysis(db, analysis_id, with_mentions=True)
        return analysis.to_dict(include_mentions=True) if analysis else None


# ─── Sidebar ─────────────────────────────────────────────────────────────────

def render_sidebar() -> Dict:
    with st.sidebar:
        st.title("🗣️ New Analysis")
        company = st.text_input("Company / brand name", placeholder="e.g. Acme")
        platform = st.radio(
            "Platform",
            options=[p.value for p in Platform],
            format_func=lambda v: Platform(v).display_name,
            horizontal=True,
        )
        fetchers = get_fetchers()
        if not fetchers[Platform(platform)].is_configured():
            st.caption(f"⚠️ {Platform(platform).display_name} API not configured, results will be simulated.")
        st.divider()
        run_button = st.button("🚀 Analyze", type="primary", use_container_width=True)
    return {"company": company.strip(), "platform": Platform(platform), "run": run_button}


def start_analysis(company: str, platform: Platform) -> Optional[int]:
    report = run_analysis(company, platform, fetcher=get_fetchers()[platform])
    with get_db() as db:
        record = crud.create_analysis(db, crud.get_or_create_company(db, company), report)
        return record.analysis_id


# ─── Report View ─────────────────────────────────────────────────────────────

def render_kpis(analysis: Dict[str, Any]):
    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("💬 Mentions", analysis["totalTweets"])
    col2.metric("😊 Positive", analysis["positiveTweets"])
    col3.metric("😞 Negative", analysis["negativeTweets"])
    col4.metric("📈 Sentiment Score", f"{analysis['sentimentScore'] * 100:.1f}%")
    col5.metric("🔥 Engagement", f"{analysis['engagementRate'] * 100:.2f}%")
    st.caption(f"Estimated reach: {analysis['reachEstimate']:,}")


def render_mentions(analysis: Dict[str, Any]):
    st.subheader("📝 Analyzed Mentions")
    rows = [{
        "Sentiment": m["sentiment"],
        "Author": m["author"],
        "Content": m["content"],
        "Likes": m["likes"],
        "Re-shares": m["retweets"],
        "Replies": m["replies"],
        "Subreddit": m.get("subreddit") or "",
    } for m in analysis.get("tweets", [])]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


def render_report(analysis: Dict[str, Any]):
    st.header(f"{analysis['company']['name']} on {analysis['platform'].capitalize()}")
    if analysis["dataSource"] == "real":
        st.success("✅ Real data from the platform API")
    else:
        st.warning(f"ℹ️ Simulated data. {analysis.get('errorMessage') or ''}")

    render_kpis(analysis)
    st.divider()

    col_l, col_r = st.columns(2)
    with col_l:
        st.plotly_chart(sentiment_pie(analysis), use_container_width=True)
    with col_r:
        st.plotly_chart(engagement_bar(analysis), use_container_width=True)
    st.plotly_chart(competitor_bar(analysis), use_container_width=True)

    col_t, col_i = st.columns([1, 2])
    with col_t:
        st.subheader("🏷️ Top Topics")
        for topic in analysis["topTopics"]:
            st.markdown(f"`{topic}`")
    with col_i:
        st.subheader("💡 Insights")
        for insight in analysis["insights"]:
            st.markdown(f"- {insight}")

    render_mentions(analysis)


# ─── History ─────────────────────────────────────────────────────────────────

def render_history():
    with get_db() as db:
        history = [a.to_dict() for a in crud.list_analyses(db, limit=settings.HISTORY_LIMIT)]

    if not history:
        st.info("No analyses yet.")
        return

    for item in history:
        col1, col2, col3, col4 = st.columns([3, 2, 1, 1])
        col1.markdown(
            f"**{item['company']['name']}** · {item['platform']} · "
            f"{item['totalTweets']} mentions · {item['dataSource']}"
        )
        col2.caption(item["createdAt"])
        if col3.button("Open", key=f"open_{item['id']}"):
            get_state().analysis_id = item["id"]
            st.rerun()
        if col4.button("🗑️", key=f"delete_{item['id']}"):
            with get_db() as db:
                crud.delete_analysis(db, item["id"])
            if get_state().analysis_id == item["id"]:
                get_state().analysis_id = None
            st.rerun()


# ─── Main App ─────────────────────────────────────────────────────────────────

def main():
    st.title("🗣️ Voice of Customer Analyzer")
    st.caption("Brand sentiment, engagement and topics from Twitter/X and Reddit")

    config = render_sidebar()
    state = get_state()

    if config["run"]:
        if not config["company"]:
            st.error("Company name is required.")
        else:
            with st.spinner("Fetching and analyzing mentions..."):
                try:
                    state.analysis_id = start_analysis(config["company"], config["platform"])
                except EmptyBatchError:
                    st.error("No mentions found. Try again later or check the company name.")
                except PipelineError as e:
                    st.error(f"❌ Analysis failed: {e}")

    tab_report, tab_history = st.tabs(["📊 Report", "🕘 History"])

    with tab_report:
        analysis = load_analysis(state.analysis_id) if state.analysis_id else None
        if analysis is None:
            st.info("👈 Enter a company name in the sidebar and click **Analyze**.")
        else:
            render_report(analysis)
            created_at = datetime.fromisoformat(analysis["createdAt"])
            st.download_button(
                "⬇️ Download report",
                data=render_report_html(
                    analysis["company"]["name"],
                    {
                        "platform": analysis["platform"],
                        "is_real_data": analysis["dataSource"] == "real",
                        "total_tweets": analysis["totalTweets"],
                        "positive_tweets": analysis["positiveTweets"],
                        "negative_tweets": analysis["negativeTweets"],
                        "neutral_tweets": analysis["neutralTweets"],
                        "sentiment_score": analysis["sentimentScore"],
                        "engagement_rate": analysis["engagementRate"],
                        "reach_estimate": analysis["reachEstimate"],
                        "top_topics": analysis["topTopics"],
                        "competitors": analysis["competitors"],
                        "insights": analysis["insights"],
                    },
                    created_at=created_at,
                ),
                file_name=report_filename(analysis["company"]["name"], created_at),
                mime="text/html",
            )

    with tab_history:
        render_history()


if __name__ == "__main__":
    main()
