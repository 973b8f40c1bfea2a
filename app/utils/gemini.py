"""
Gemini Insights Service
Builds a spending summary prompt and asks Google Gemini for advice
"""
import asyncio
import logging
from typing import Any, Mapping, Optional, Sequence

import google.generativeai as genai

from app.core.config import settings
from app.core.errors import AppError, classify_ai_error
from app.utils.aggregation import category_totals, to_date
from app.utils.currency import format_currency

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Request timeout - AI service took too long to respond"

if not settings.GEMINI_API_KEY:
    logger.warning("GEMINI_API_KEY is not set. AI insights will not be available.")


def format_expenses_for_prompt(expenses: Sequence[Mapping[str, Any]], currency: str = "USD") -> str:
    total = sum(float(exp.get("amount", 0)) for exp in expenses)

    totals = sorted(category_totals(expenses).items(), key=lambda item: item[1], reverse=True)
    category_lines = "\n".join(
        f"  - {category}: {format_currency(amount, currency)}" for category, amount in totals
    )

    dates = sorted(to_date(exp["date"]) for exp in expenses if exp.get("date"))
    start = dates[0].isoformat() if dates else "N/A"
    end = dates[-1].isoformat() if dates else "N/A"

    return (
        f"Total Expenses: {format_currency(total, currency)}\n"
        f"Number of Transactions: {len(expenses)}\n"
        f"Date Range: {start} to {end}\n"
        f"\n"
        f"Spending by Category:\n"
        f"{category_lines}"
    )


def build_insights_prompt(expenses: Sequence[Mapping[str, Any]], currency: str = "USD") -> str:
    summary = format_expenses_for_prompt(expenses, currency)
    return (
        "You are a personal finance assistant analyzing spending habits. "
        "Based on the following expense data, provide:\n"
        "\n"
        "1. A brief summary of spending habits (2-3 sentences)\n"
        "2. Two specific, actionable saving recommendations\n"
        "3. One motivational message to encourage better financial habits\n"
        "\n"
        "Expense Data:\n"
        f"{summary}\n"
        "\n"
        "Please format your response in a clear, friendly, and encouraging tone. "
        "Keep it concise and actionable."
    )


class GeminiInsights:
    """Thin wrapper over a Gemini model with a hard wall-clock timeout per call."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        timeout: Optional[float] = None,
        model: Any = None,
    ) -> None:
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.model_name = model_name or settings.GEMINI_MODEL
        self.timeout = settings.AI_TIMEOUT_SECONDS if timeout is None else timeout
        self._model = model

    def _get_model(self):
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                self.model_name,
                generation_config=genai.types.GenerationConfig(
                    temperature=0.7,
                    max_output_tokens=1024,
                ),
            )
        return self._model

    async def get_spending_insights(
        self,
        expenses: Sequence[Mapping[str, Any]],
        currency: str = "USD",
    ) -> str:
        """Return the model's advice text; failures are raised as classified AppErrors."""
        try:
            if not self.api_key:
                raise ValueError("Gemini API key is not configured")
            if not expenses:
                raise ValueError("No expense data provided for analysis")

            prompt = build_insights_prompt(expenses, currency)
            model = self._get_model()

            try:
                response = await asyncio.wait_for(
                    model.generate_content_async(prompt), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                raise TimeoutError(TIMEOUT_MESSAGE)

            text = response.text
            if not text or not text.strip():
                raise ValueError("Empty response from Gemini API")
            return text
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error generating spending insights: {str(e)}")
            raise classify_ai_error(e) from e

