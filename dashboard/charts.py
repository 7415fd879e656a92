"""
Plotly figure builders for the dashboard.
Inputs are the camelCase analysis payloads produced by `Analysis.to_dict`.
"""

from typing import Any, Dict, List

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

SENTIMENT_COLORS = {"Positive": "#10b981", "Negative": "#ef4444", "Neutral": "#6b7280"}


def sentiment_frame(analysis: Dict[str, Any]) -> pd.DataFrame:
    """Mention count, total and average engagement per sentiment."""
    mentions: List[Dict[str, Any]] = analysis.get("tweets") or []
    rows = []
    for label, count_key in (
        ("positive", "positiveTweets"),
        ("negative", "negativeTweets"),
        ("neutral", "neutralTweets"),
    ):
        engagement = sum(
            m["likes"] + m["retweets"] + m["replies"]
            for m in mentions if m["sentiment"] == label
        )
        count = analysis[count_key]
        rows.append({
            "Sentiment": label.capitalize(),
            "Mentions": count,
            "Engagement": engagement,
            "Avg Engagement": round(engagement / count) if count else 0,
        })
    return pd.DataFrame(rows)


def sentiment_pie(analysis: Dict[str, Any]) -> go.Figure:
    df = sentiment_frame(analysis)
    df = df[df["Mentions"] > 0]
    fig = px.pie(
        df,
        names="Sentiment",
        values="Mentions",
        color="Sentiment",
        color_discrete_map=SENTIMENT_COLORS,
        hole=0.4,
        title="Sentiment Distribution",
    )
    fig.update_layout(height=350)
    return fig


def engagement_bar(analysis: Dict[str, Any]) -> go.Figure:
    df = sentiment_frame(analysis)
    fig = go.Figure()
    fig.add_trace(go.Bar(
        name="Mentions", x=df["Sentiment"], y=df["Mentions"], marker_color="#3b82f6",
    ))
    fig.add_trace(go.Bar(
        name="Avg Engagement", x=df["Sentiment"], y=df["Avg Engagement"], marker_color="#8b5cf6",
    ))
    fig.update_layout(
        barmode="group",
        title="Engagement by Sentiment",
        height=350,
        legend=dict(orientation="h", yanchor="bottom", y=1.02),
    )
    return fig


def competitor_frame(analysis: Dict[str, Any]) -> pd.DataFrame:
    """The analysed company first, then its synthesized competitors (in %)."""
    rows = [{
        "Company": analysis["company"]["name"],
        "Sentiment Score (%)": round(analysis["sentimentScore"] * 100, 1),
        "Engagement Rate (%)": round(analysis["engagementRate"] * 100, 2),
        "Mentions": analysis["totalTweets"],
        "Is You": True,
    }]
    for comp in analysis.get("competitors") or []:
        rows.append({
            "Company": comp["name"],
            "Sentiment Score (%)": round(comp["sentimentScore"] * 100, 1),
            "Engagement Rate (%)": round(comp["engagementRate"] * 100, 2),
            "Mentions": comp["totalMentions"],
            "Is You": False,
        })
    return pd.DataFrame(rows)


def competitor_bar(analysis: Dict[str, Any]) -> go.Figure:
    df = competitor_frame(analysis)
    fig = px.bar(
        df,
        x="Company",
        y=["Sentiment Score (%)", "Engagement Rate (%)"],
        barmode="group",
        title="Competitor Comparison (competitors are simulated)",
    )
    fig.update_layout(height=380, legend_title="Metric")
    return fig
