"""
Tests for the Gemini feedback summarizer.

Run with: pytest tests/test_gemini.py -v
"""

from unittest.mock import MagicMock, patch

import pytest

from reviewlink.core.gemini import GeminiClient
from reviewlink.schemas import SummaryComment, SummaryRequest


def _request(*versions):
    return SummaryRequest(
        comments=[SummaryComment(text=f"note {i}", version=v) for i, v in enumerate(versions)],
        video_title="Launch teaser",
    )


@pytest.fixture
def genai():
    with patch("reviewlink.core.gemini.genai") as mock_genai:
        yield mock_genai


class TestGeminiClient:
    """Tests for GeminiClient."""

    def test_requires_api_key(self, genai):
        with patch("reviewlink.core.gemini.GEMINI_API_KEY", ""):
            with pytest.raises(RuntimeError):
                GeminiClient()
        genai.configure.assert_not_called()

    def test_configures_api_key(self, genai):
        GeminiClient(api_key="secret")
        genai.configure.assert_called_once_with(api_key="secret")

    def test_prompt_lists_comments(self, genai):
        prompt = GeminiClient(api_key="k").build_prompt(_request(1, 1))
        assert 'video titled "Launch teaser"' in prompt
        assert '- V1: "note 0"' in prompt
        assert '- V1: "note 1"' in prompt
        assert "by video version" not in prompt

    def test_prompt_groups_multiple_versions(self, genai):
        prompt = GeminiClient(api_key="k").build_prompt(_request(1, 2))
        assert "by video version" in prompt
        assert '- V2: "note 1"' in prompt

    def test_summarize(self, genai):
        genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(text=" Brighten it. ")

        response = GeminiClient(api_key="k").summarize(_request(1))

        assert response.summary == "Brighten it."
        genai.GenerativeModel.assert_called_once_with(GeminiClient.FALLBACK_MODELS[0])

    def test_falls_back_to_next_model(self, genai):
        genai.GenerativeModel.return_value.generate_content.side_effect = [
            Exception("quota exceeded"),
            MagicMock(text=""),
            MagicMock(text="Third time lucky"),
        ]

        response = GeminiClient(api_key="k").summarize(_request(1))

        assert response.summary == "Third time lucky"
        models = [c.args[0] for c in genai.GenerativeModel.call_args_list]
        assert models == GeminiClient.FALLBACK_MODELS

    def test_all_models_fail(self, genai):
        genai.GenerativeModel.return_value.generate_content.side_effect = Exception("unavailable")

        with pytest.raises(RuntimeError, match="unavailable"):
            GeminiClient(api_key="k").summarize(_request(1))
