"""
LLM-powered operations analyst for the Reactor Planner.
STRATEGY: One compact request per report. Only the ten busiest-listed reactors
are summarized so the prompt stays small and cheap.
"""

import os
import logging
from typing import Dict, List, Optional, Sequence

import google.generativeai as genai

from models import OccupancyMetric, Reactor

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
SUMMARY_LIMIT = 10

UNAVAILABLE_MESSAGE = "AI Insights Unavailable: System configuration required."
EMPTY_MESSAGE = "No critical operational variance detected."
FAILURE_MESSAGE = "Operations analyst engine is recalibrating data models..."


class OccupancyAnalyst:
    """
    Turns occupancy metrics into a short management brief.
    Never raises: every failure path returns a readable fallback message.
    """

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        self.model_name = model_name or os.environ.get("PLANNER_INSIGHTS_MODEL", DEFAULT_MODEL)
        self.total_cost = 0.0
        self.model = None

        if self.api_key:
            genai.configure(api_key=self.api_key)
            self.model = genai.GenerativeModel(self.model_name)
        else:
            logger.warning("GOOGLE_API_KEY not set; insights disabled.")

    @property
    def enabled(self) -> bool:
        return self.model is not None

    def _estimate_cost(self, prompt_tokens: int, response_tokens: int) -> float:
        return (prompt_tokens * 0.075 + response_tokens * 0.30) / 1_000_000

    @staticmethod
    def summarize(metrics: Sequence[OccupancyMetric], reactors: Sequence[Reactor] = ()) -> str:
        """Condense the first ten metrics into one line of context."""
        blocks: Dict[str, str] = {r.serial_no: r.block_name for r in reactors}
        parts = []
        for m in list(metrics)[:SUMMARY_LIMIT]:
            block = m.block_name or blocks.get(m.reactor_serial_no, "")
            parts.append(
                f"{m.reactor_serial_no} ({block}): "
                f"Actual {m.actual_percent:.1f}%, Proposed {m.proposed_percent:.1f}%"
            )
        return "; ".join(parts)

    def build_prompt(self, summary: str) -> str:
        return f"""
        Manufacturing Reactor System Analysis:
        Current Data: {summary}

        Task: As a plant operations analyst, provide 3 concise management insights.
        Focus on:
        1. Utilization efficiency between Proposed and Confirmed logs.
        2. Identifying the highest performing block.
        3. Recommendations for managing maintenance downtime.
        Format: Single paragraph with bullet points.
        """

    def generate_insights(self, metrics: Sequence[OccupancyMetric], reactors: Sequence[Reactor] = ()) -> str:
        if not self.enabled:
            return UNAVAILABLE_MESSAGE

        prompt = self.build_prompt(self.summarize(metrics, reactors))
        logger.info(f"Requesting insights for {min(len(metrics), SUMMARY_LIMIT)} reactors from {self.model_name}")

        try:
            response = self.model.generate_content(prompt)

            if hasattr(response, 'usage_metadata'):
                p_tok = response.usage_metadata.prompt_token_count
                r_tok = response.usage_metadata.candidates_token_count
                self.total_cost += self._estimate_cost(p_tok, r_tok)

            text = (response.text or "").strip()
            return text or EMPTY_MESSAGE

        except Exception as e:
            # The report must still render without the LLM
            logger.error(f"Insight generation failed: {e}")
            return FAILURE_MESSAGE


def bullet_lines(insights: str) -> List[str]:
    """Split a generated brief into display lines, dropping bullet markers."""
    lines = []
    for raw in insights.splitlines():
        line = raw.strip().lstrip("-*•").strip()
        if line:
            lines.append(line)
    return lines
