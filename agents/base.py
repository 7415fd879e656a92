"""
Base Agent class and Orchestrator
Voice of Customer Analyzer
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Dict
from dataclasses import dataclass, field
from datetime import datetime
import logging
import time

logger = logging.getLogger(__name__)


@dataclass
class AgentResult:
    """Standardized result envelope returned by every agent."""
    agent_name: str
    success: bool
    data: Any = None
    error: Optional[str] = None
    exception: Optional[BaseException] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def __repr__(self):
        status = "✅" if self.success else "❌"
        dur = f" ({self.duration_seconds:.2f}s)" if self.duration_seconds else ""
        return f"{status} {self.agent_name}{dur}"


class Agent(ABC):
    """
    Abstract base class for all pipeline agents.
    Subclasses must implement `run(data)`.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"agent.{name}")

    @abstractmethod
    def run(self, data: Any) -> Any:
        raise NotImplementedError

    def execute(self, data: Any) -> AgentResult:
        """
        Wraps `run()` with timing, structured logging, and error handling.
        The raised exception is kept on the result so callers can re-raise it.
        """
        started_at = datetime.utcnow()
        self.logger.debug(f"[{self.name}] Starting...")
        try:
            result = self.run(data)
        except Exception as e:
            finished_at = datetime.utcnow()
            self.logger.error(f"[{self.name}] Failed: {e}", exc_info=True)
            return AgentResult(
                agent_name=self.name,
                success=False,
                error=str(e),
                exception=e,
                started_at=started_at,
                finished_at=finished_at,
            )

        finished_at = datetime.utcnow()
        duration = (finished_at - started_at).total_seconds()
        self.logger.debug(f"[{self.name}] Completed in {duration:.3f}s")
        return AgentResult(
            agent_name=self.name,
            success=True,
            data=result,
            started_at=started_at,
            finished_at=finished_at,
        )

    def __repr__(self):
        return f"<Agent: {self.name}>"


class Orchestrator:
    """
    Sequential pipeline orchestrator.
    Each agent's output becomes the next agent's input; the first failure
    stops the run.
    """

    def __init__(self, agents: List[Agent]):
        self.agents = agents
        self.logger = logging.getLogger("orchestrator")
        self.run_history: List[AgentResult] = []

    def execute(self, input_data: Any) -> AgentResult:
        """Execute the full pipeline and return the final AgentResult."""
        self.run_history.clear()
        data = input_data
        total_start = time.time()

        for agent in self.agents:
            result = agent.execute(data)
            self.run_history.append(result)
            if not result.success:
                self.logger.error(f"'{agent.name}' failed: {result.error}")
                return result
            data = result.data

        elapsed = time.time() - total_start
        self.logger.info(
            f"Pipeline complete — {len(self.agents)} agents in {elapsed:.2f}s"
        )
        return self.run_history[-1]

    def summary(self) -> str:
        lines = ["Pipeline Summary:"]
        for r in self.run_history:
            lines.append(f"  {r}")
        return "\n".join(lines)
