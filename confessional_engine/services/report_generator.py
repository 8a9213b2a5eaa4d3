"""One-shot report drafting."""

from typing import Any, Dict

from ..core.exceptions import ProtocolError
from ..models.chat import ReportRequest, ReportResponse
from ..models.engine import EngineConfig
from ..utils.loguru_config import get_logger
from .config_store import ConfigStore
from .ollama_client import OllamaClient
from .prompts import build_report_prompt

logger = get_logger(__name__)

REPORT_OPTIONS = {"temperature": 0.7, "top_p": 0.8}


def extract_message_content(data: Any) -> str:
    """Answer at ``choices[0].message.content``."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ProtocolError("Invalid response format: malformed response") from e
    if not isinstance(content, str):
        raise ProtocolError("Invalid response format: malformed response")
    return content


class ReportGenerator:
    """Drafts a markdown report with the active pack's report model."""

    def __init__(self, client: OllamaClient):
        self.client = client

    async def generate_report(self, config: EngineConfig, request: ReportRequest) -> ReportResponse:
        model = ConfigStore.active_pack(config).report_model
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [
                {
                    "role": "user",
                    "content": build_report_prompt(
                        request.template_type,
                        request.audience,
                        request.data_summary,
                    ),
                }
            ],
            "stream": False,
            **REPORT_OPTIONS,
        }

        logger.info(f"Generating '{request.template_type}' report with {model}")
        data = await self.client.chat_completion(config.server_url, payload)
        markdown = extract_message_content(data)
        logger.info(f"Report generated: {len(markdown)} chars")
        return ReportResponse(markdown=markdown, model_name=model)
