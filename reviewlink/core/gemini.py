import logging
import textwrap
from typing import Protocol

import google.generativeai as genai

from reviewlink.config import GEMINI_API_KEY
from reviewlink.schemas import SummaryRequest, SummaryResponse

logger = logging.getLogger(__name__)


class Summarizer(Protocol):
    def summarize(self, request: SummaryRequest) -> SummaryResponse:
        ...


class GeminiClient:
    """
    Wrapper around the Gemini API with fallback support for multiple models.
    """

    FALLBACK_MODELS = [
        "gemini-2.5-flash",
        "gemini-2.5-flash-lite",
        "gemini-2.5-pro",
    ]

    def __init__(self, api_key: str | None = None):
        api_key = api_key or GEMINI_API_KEY
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY is not set in environment.")
        genai.configure(api_key=api_key)

    def build_prompt(self, request: SummaryRequest) -> str:
        comment_lines = "\n".join(
            f'- V{c.version}: "{c.text}"' for c in request.comments
        )
        grouping = ""
        if len(request.versions) > 1:
            grouping = "Organize the summary by video version, since the comments cover several versions."

        return textwrap.dedent(
            f"""
            You are a helpful assistant for video editors. Your task is to summarize the feedback for a video titled "{request.video_title}".

            Review the following comments and provide a clear, concise summary of the key feedback points and actionable suggestions.
            {grouping}

            Here are the comments:
            """
        ).strip() + "\n" + comment_lines

    def summarize(self, request: SummaryRequest) -> SummaryResponse:
        prompt = self.build_prompt(request)
        last_error = None

        for model_name in self.FALLBACK_MODELS:
            logger.info(f"Summarizing {len(request.comments)} comments with model: {model_name}")
            try:
                model = genai.GenerativeModel(model_name)
                response = model.generate_content(prompt)

                text = (response.text or "").strip()
                if not text:
                    raise ValueError("Empty summary returned")

                logger.info(f"Success with {model_name}")
                return SummaryResponse(summary=text)

            except Exception as e:
                logger.warning(f"Failed with {model_name}: {e}")
                last_error = e
                continue

        raise RuntimeError(f"All Gemini models failed. Last error: {last_error}")
