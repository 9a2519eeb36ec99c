import logging

from openai import AzureOpenAI

from appium_lib_ext.config import GenerationConfig
from libs.dataclass.errors import MissingCredential
from llm_service.abstract_llm_client import AbstractLLMClient

logger = logging.getLogger(__name__)

DEFAULT_AZURE_API_VERSION = "2024-06-01"


class AzureLLMClient(AbstractLLMClient):
    """Azure deployment; ``model`` is the deployment name."""

    def __init__(self, base_url: str, api_key: str, api_version: str = None, model: str = None,
                 timeout_s: float = 120):
        if not api_key:
            raise MissingCredential("AZURE_OPENAI_API_KEY is not set.")
        api_version = api_version or DEFAULT_AZURE_API_VERSION
        try:
            client = AzureOpenAI(
                api_version=api_version,
                azure_endpoint=base_url,
                api_key=api_key,
                timeout=timeout_s,
            )
            logger.info(f"Azure OpenAI client initialized for deployment {model} at {base_url}")
        except Exception as e:
            logger.error(f"Error initializing Azure OpenAI client: {e}")
            raise e

        super().__init__({
            "base_url": base_url,
            "api_key": api_key,
            "api_version": api_version,
            "model": model,
            "client": client,
        })

    @classmethod
    def from_config(cls, cfg: GenerationConfig) -> "AzureLLMClient":
        return cls(base_url=cfg.azureEndpoint, api_key=cfg.apiKey, api_version=cfg.azureApiVersion,
                   model=cfg.model)
