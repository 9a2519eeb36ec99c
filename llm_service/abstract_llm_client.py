"""
Date                            Author                                          Changes
17-10-2026                      QA Tooling                                      Attempt budget, text response format
"""
import json
import logging
import time
from abc import ABC
from typing import Any, Dict, List, Optional

from openai import AuthenticationError, BadRequestError, OpenAI, PermissionDeniedError

logger = logging.getLogger(__name__)


class AbstractLLMClient(ABC):
    def __init__(self, init_client_config: dict):
        self.history: List[Dict] = []
        self.base_url = init_client_config.get("base_url") if init_client_config.get("base_url") else None
        self.api_key = init_client_config.get("api_key") if init_client_config.get("api_key") else None
        self.api_version = init_client_config.get("api_version") if init_client_config.get("api_version") else None
        self.model = init_client_config.get("model") if init_client_config.get("model") else None
        self.client: OpenAI = init_client_config.get("client") if init_client_config.get("client") else None
        client_msg = f'Initialized' if self.client is not None else None
        logger.info(
            f'base_url: {self.base_url}, api_version: {self.api_version}, model: {self.model}, client: {client_msg}')

    def execute_chat_completion_api(self, message: List[Dict], response_format: Optional[Dict[str, str]] = None,
                                    temperature=0.2, max_tokens=16000, max_attempts: int = 2,
                                    retry_delay_s: float = 1.0) -> Any:
        """
        One chat completion. ``json_object`` responses come back decoded, ``text``
        responses come back as the raw string. Authentication, bad-request and
        permission errors are raised at once; anything else is retried until
        ``max_attempts`` is spent.
        """
        if response_format is None:
            response_format = dict(
                type="json_object")
        attempt_counter = 1
        last_error: Optional[Exception] = None
        while attempt_counter <= max_attempts:
            print(f'Fetching LLM Chat Completion API Response (Attempt Counter) - {attempt_counter}')
            try:

                response = self.client.chat.completions.create(model=self.model,
                                                               messages=message,
                                                               response_format=response_format,
                                                               temperature=temperature,
                                                               max_tokens=max_tokens)

                logger.info(f'chat completion response after Attempt - {attempt_counter}- \n '
                            f'model - {self.model} \n'
                            f'response - {response}')
                content = response.choices[0].message.content
                if response_format.get("type") == "json_object":
                    return json.loads(content)
                return content
            except AuthenticationError as e:
                msg = 'LLM Authentication Error'
                logger.error(msg)
                print(msg)
                raise e
            except BadRequestError as e:
                msg = 'LLM Bad Request Error'
                logger.error(msg)
                print(msg)
                raise e
            except PermissionDeniedError as e:
                msg = 'LLM Permission Denied Error'
                logger.error(msg)
                print(msg)
                raise e

            except Exception as e:
                last_error = e
                logger.warning(f'Chat completion attempt {attempt_counter} failed: {e}')
                attempt_counter += 1
                if attempt_counter <= max_attempts:
                    time.sleep(retry_delay_s)
        raise ValueError(f'LLM Model - Chat Completion Not Working: {last_error}') from last_error

    def add_chat_history(self, list_message):
        self.history.append(list_message)

    def get_chat_history(self):
        return self.history
