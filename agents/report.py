"""
Report Agent
-------------
Aggregates a classified batch into the Voice of Customer report:
metrics, top topics, synthesized competitors and insights.

Input:  ClassifiedBatch
Output: VoCReport
"""

from agents.base import Agent
from agents.competitors import synthesize_competitors
from agents.insights import generate_insights
from agents.metrics import aggregate_metrics
from agents.sentiment import extract_topics
from models.schemas import ClassifiedBatch, VoCReport


class ReportAgent(Agent):
    """
    Agent 3: Report Builder

    Input:  ClassifiedBatch
    Output: VoCReport
    """

    def __init__(self):
        super().__init__(name="ReportAgent")

    def run(self, batch: ClassifiedBatch) -> VoCReport:
        metrics = aggregate_metrics(batch.mentions)
        topics = extract_topics(c.mention.content for c in batch.mentions)
        competitors = synthesize_competitors(batch.company_name)
        insights = generate_insights(
            metrics, batch.platform, batch.is_real_data, batch.error_message
        )

        self.logger.info(
            f"Report for '{batch.company_name}': score={metrics.sentiment_score:.2f} "
            f"engagement={metrics.engagement_rate:.3f} reach={metrics.reach_estimate}"
        )
        return VoCReport(
            company_name=batch.company_name,
            platform=batch.platform,
            is_real_data=batch.is_real_data,
            error_message=batch.error_message,
            metrics=metrics,
            mentions=batch.mentions,
            top_topics=topics,
            competitors=competitors,
            insights=insights,
        )
