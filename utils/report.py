"""
Static HTML report for one persisted analysis (the downloadable "PDF").
"""

from datetime import datetime
from typing import Any, Dict, List

from jinja2 import Environment, select_autoescape

_env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))

REPORT_TEMPLATE = _env.from_string("""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>Voice of Customer Report - {{ company_name }}</title>
  <style>
    body { font-family: Arial, sans-serif; margin: 40px; color: #333; }
    .header { text-align: center; border-bottom: 2px solid #3b82f6; padding-bottom: 20px; margin-bottom: 30px; }
    .section { margin-bottom: 30px; }
    .metric { display: inline-block; margin: 10px 20px; text-align: center; }
    .metric-value { font-size: 24px; font-weight: bold; color: #3b82f6; }
    .metric-label { font-size: 12px; color: #666; }
    .positive { color: #10b981; }
    .negative { color: #ef4444; }
    .neutral { color: #6b7280; }
    table { width: 100%; border-collapse: collapse; margin: 20px 0; }
    th, td { padding: 12px; text-align: left; border-bottom: 1px solid #e5e7eb; }
    th { background-color: #f9fafb; font-weight: bold; }
    .insights { background-color: #f0f9ff; padding: 20px; border-radius: 8px; }
  </style>
</head>
<body>
  <div class="header">
    <h1>Voice of Customer Analysis Report</h1>
    <h2>{{ company_name }}</h2>
    <p>Platform: {{ platform }} ({{ data_source }} data)</p>
    <p>Generated on: {{ generated_on }}</p>
  </div>

  <div class="section">
    <h3>Executive Summary</h3>
    <div class="metric">
      <div class="metric-value">{{ total }}</div>
      <div class="metric-label">Total Mentions</div>
    </div>
    <div class="metric">
      <div class="metric-value positive">{{ positive }}</div>
      <div class="metric-label">Positive</div>
    </div>
    <div class="metric">
      <div class="metric-value negative">{{ negative }}</div>
      <div class="metric-label">Negative</div>
    </div>
    <div class="metric">
      <div class="metric-value neutral">{{ neutral }}</div>
      <div class="metric-label">Neutral</div>
    </div>
    <div class="metric">
      <div class="metric-value">{{ "%.1f" | format(sentiment_score * 100) }}%</div>
      <div class="metric-label">Sentiment Score</div>
    </div>
    <div class="metric">
      <div class="metric-value">{{ "%.2f" | format(engagement_rate * 100) }}%</div>
      <div class="metric-label">Engagement Rate</div>
    </div>
    <div class="metric">
      <div class="metric-value">{{ reach_estimate }}</div>
      <div class="metric-label">Estimated Reach</div>
    </div>
  </div>

  <div class="section">
    <h3>Top Topics</h3>
    <ul>
      {% for topic in topics %}<li>{{ topic }}</li>{% endfor %}
    </ul>
  </div>

  <div class="section">
    <h3>Competitor Comparison</h3>
    <table>
      <thead>
        <tr><th>Company</th><th>Sentiment Score</th><th>Total Mentions</th></tr>
      </thead>
      <tbody>
        {% for comp in competitors %}
        <tr>
          <td>{{ comp.name }}</td>
          <td>{{ "%.1f" | format(comp.sentimentScore * 100) }}%</td>
          <td>{{ comp.totalMentions }}</td>
        </tr>
        {% endfor %}
      </tbody>
    </table>
  </div>

  <div class="section">
    <h3>Insights &amp; Recommendations</h3>
    <div class="insights">
      {% for insight in insights %}<p>• {{ insight }}</p>{% endfor %}
    </div>
  </div>
</body>
</html>
""")


def render_report_html(
    company_name: str,
    analysis: Dict[str, Any],
    created_at: datetime,
) -> str:
    """
    Render the report. `analysis` uses the persisted field names
    (total_tweets, top_topics, competitors, insights, ...).
    """
    competitors: List[Dict[str, Any]] = analysis.get("competitors") or []
    return REPORT_TEMPLATE.render(
        company_name=company_name,
        platform=str(analysis.get("platform", "")).capitalize(),
        data_source="real" if analysis.get("is_real_data") else "simulated",
        generated_on=created_at.strftime("%Y-%m-%d"),
        total=analysis["total_tweets"],
        positive=analysis["positive_tweets"],
        negative=analysis["negative_tweets"],
        neutral=analysis["neutral_tweets"],
        sentiment_score=analysis["sentiment_score"],
        engagement_rate=analysis["engagement_rate"],
        reach_estimate=analysis["reach_estimate"],
        topics=analysis.get("top_topics") or [],
        competitors=competitors,
        insights=analysis.get("insights") or [],
    )


def report_filename(company_name: str, when: datetime) -> str:
    safe = "".join(ch if (ch.isascii() and ch.isalnum()) or ch in "-_" else "-" for ch in company_name)
    return f"voc-report-{safe}-{when.strftime('%Y-%m-%d')}.html"
