"""
Insight generation: turns batch metrics and provenance into an ordered list
of human-readable observations. Deterministic, no randomness.

Order: provenance → sentiment tier → engagement tier → positive/negative
comparison → volume → call to action → platform notes → closing lines.
"""

from typing import List, Optional

from models.schemas import AnalysisMetrics, Platform


def _time_frame(platform: Platform) -> str:
    if platform == Platform.TWITTER:
        return "last 2 hours (Brazil)"
    return "last 24 hours"


def generate_insights(
    metrics: AnalysisMetrics,
    platform: Platform,
    is_real_data: bool = False,
    error_message: Optional[str] = None,
) -> List[str]:
    insights: List[str] = []
    name = platform.display_name
    time_frame = _time_frame(platform)

    score = metrics.sentiment_score
    engagement = metrics.engagement_rate
    positive = metrics.positive_tweets
    negative = metrics.negative_tweets
    total = metrics.total_tweets

    # Provenance
    if not is_real_data:
        if error_message:
            insights.append(f"ℹ️ {error_message}")
        else:
            insights.append(f"ℹ️ Simulated data due to {name} API limitations")
    else:
        insights.append(f"✅ Analysis based on real {name} data from the {time_frame}")

    # Sentiment: four disjoint bands, nothing for [0.4, 0.6]
    if score > 0.7:
        insights.append(f"🎉 Excellent! Your brand is perceived very positively on {name}")
    elif score > 0.6:
        insights.append("👍 Good brand perception, with mostly positive comments")
    elif score < 0.3:
        insights.append("🚨 Critical: brand perception is predominantly negative")
    elif score < 0.4:
        insights.append("⚠️ Attention: there is significant room to improve brand perception")

    # Engagement
    if engagement > 0.08:
        insights.append("🔥 Excellent engagement! Your audience is very active")
    elif engagement > 0.05:
        insights.append("📈 Good engagement level, showing a connection with the audience")
    elif engagement < 0.02:
        insights.append("📊 Low engagement - consider strategies to increase interaction")

    # Comparison
    if negative > positive:
        insights.append("🎯 Prioritize improving the customer experience to turn negative sentiment around")
    elif positive > negative * 2:
        insights.append("✨ Great! Positive comments clearly outnumber negative ones")

    # Volume
    if is_real_data:
        low = 5 if platform == Platform.TWITTER else 3
        good = 8 if platform == Platform.TWITTER else 5
        if total < low:
            insights.append(f"📢 Few mentions in the {time_frame} - consider peak activity hours")
        elif total >= good:
            insights.append(f"🌟 Good mention activity in the {time_frame}")
    else:
        if total < 10:
            insights.append("📢 Low mention volume - consider increasing your digital presence")
        elif total > 20:
            insights.append("🌟 High mention volume indicates good brand visibility")

    # Call to action
    if is_real_data:
        insights.append("📱 Real-time data - keep monitoring emerging trends")
    else:
        insights.append(f"📱 Configure the {name} API for real-time analysis")

    # Platform notes
    if platform == Platform.REDDIT:
        insights.append("💬 Reddit hosts deeper discussions - read the comments for detailed insights")
        if positive > 0:
            insights.append("🏆 Positive Reddit posts tend to generate more organic engagement")
    else:
        insights.append("🔄 Twitter allows quick responses - monitor mentions for immediate engagement")

    if negative > 0:
        insights.append("💬 Reply proactively to negative comments to show you care")
    if positive > 0:
        insights.append("🙏 Thank and interact with positive comments to strengthen relationships")

    return insights
