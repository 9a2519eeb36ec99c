import logging

from openai import OpenAI

from appium_lib_ext.config import GenerationConfig
from libs.dataclass.errors import MissingCredential
from llm_service.abstract_llm_client import AbstractLLMClient

logger = logging.getLogger(__name__)


class OpenAILLMClient(AbstractLLMClient):
    def __init__(self, api_key: str, model: str = 'gpt-4o', timeout_s: float = 120):
        if not api_key:
            raise MissingCredential("OPENAI_API_KEY is not set.")
        try:
            client = OpenAI(api_key=api_key, timeout=timeout_s)
            logger.info(f"OpenAI client initialized for model {model}")
        except Exception as e:
            logger.error(f"Error initializing OpenAI client: {e}")
            raise e

        super().__init__({"api_key": api_key, "model": model, "client": client})

    @classmethod
    def from_config(cls, cfg: GenerationConfig) -> "OpenAILLMClient":
        return cls(api_key=cfg.apiKey, model=cfg.model)
