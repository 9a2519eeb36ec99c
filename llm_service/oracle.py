"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Spec / Page Object / Locator Generation Through LLM
                                                        Strict six-field response contract, code fence tolerance

"""
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from appium_lib_ext.config import GenerationConfig
from constant.const_config import RAW_RESPONSE_EXCERPT_CHARS
from libs.artifacts.actions_exporter import EXECUTOR_METHOD
from libs.dataclass.conceptual_objects import (
    Action, ArtifactNames, GenerationArtifactSet, TestCaseDocument, artifact_set_from_dict,
)
from libs.dataclass.errors import ContractViolation, MissingCredential
from llm_service.abstract_llm_client import AbstractLLMClient
from llm_service.azure_client import AzureLLMClient
from llm_service.openai_client import OpenAILLMClient
from prompts.prompts_template import (
    get_ai_sys_role_for_artifact_generation, get_ai_user_role_for_artifact_generation,
)

logger = logging.getLogger(__name__)

EXECUTOR_CONTRACT = {
    "baseClass": "CommonActionsPage",
    "import": "../utilities/CommonActions.page",
    "methods": ["click", "waitUntilVisible", "setValue", "isVisible", "pause"],
}

_FENCE_RE = re.compile(r"^\s*(?P<fence>```|~~~)[^\n]*\n(?P<body>.*?)\n?\s*(?P=fence)\s*$", re.DOTALL)


def _read_text_safe(path: Path, limit: int) -> str:
    """Read a text file, trimming to ``limit`` characters."""
    txt = path.read_text(encoding="utf-8", errors="ignore")
    if len(txt) > limit:
        return txt[:limit] + "\n// ...\n"
    return txt


def collect_style_exemplars(spec_root: str, page_root: str, exclude: Optional[List[str]] = None,
                            limit: int = 2, max_chars: int = 4000) -> List[Dict[str, str]]:
    """
    Existing specs and page objects, oldest names first, used to show the model
    the house style. Files named in ``exclude`` (the ones being generated) are
    skipped. At most ``limit`` files are taken from each root.
    """
    exclude_set = set(exclude or [])
    exemplars: List[Dict[str, str]] = []
    for root, pattern, kind in ((spec_root, "*.spec.ts", "spec"), (page_root, "*.page.ts", "page")):
        folder = Path(root)
        if not folder.is_dir():
            continue
        taken = 0
        for path in sorted(folder.glob(pattern)):
            if taken >= limit:
                break
            if path.name in exclude_set:
                continue
            try:
                content = _read_text_safe(path, max_chars)
            except OSError as e:
                logger.warning(f"Skipping exemplar {path}: {e}")
                continue
            exemplars.append({"kind": kind, "path": path.name, "content": content})
            taken += 1
    logger.info(f"Collected {len(exemplars)} style exemplar(s)")
    return exemplars


def build_generation_payload(document: TestCaseDocument, actions: List[Action], names: ArtifactNames,
                             locator_keys: List[str], platform: str,
                             exemplars: Optional[List[Dict[str, str]]] = None,
                             captured: Optional[Dict[str, Dict[str, str]]] = None) -> Dict[str, Any]:
    return {
        "title": document.title,
        "metadata": document.metadata,
        "preconditions": document.preconditions,
        "steps": document.steps,
        "expectedResults": document.expected_results,
        "platform": platform,
        "requiredBasenames": {
            "spec": names.spec_basename,
            "page": names.page_basename,
            "locators": names.locators_basename,
        },
        "pageClass": names.page_class,
        "describeName": names.describe_name,
        "actions": [
            {**a.to_dict(), "rendered": a.render(), "executorMethod": EXECUTOR_METHOD[a.verb]}
            for a in actions
        ],
        "actionExecutor": EXECUTOR_CONTRACT,
        "locatorKeys": list(locator_keys),
        "capturedSelectors": captured or {},
        "styleExemplars": exemplars or [],
    }


def strip_code_fences(raw: str) -> str:
    """Remove one surrounding ``` or ~~~ fence, with or without a language tag."""
    m = _FENCE_RE.match(raw or "")
    if m:
        return m.group("body").strip()
    return (raw or "").strip()


def _excerpt(raw: Any) -> str:
    return str(raw)[:RAW_RESPONSE_EXCERPT_CHARS]


def parse_oracle_response(raw: Any) -> GenerationArtifactSet:
    """
    Decode the service response into the artifact set. A strict parse is tried
    first, then one retry with code fences stripped. ``locatorsContent`` must
    itself decode to a JSON object.
    """
    if isinstance(raw, dict):
        data = raw
    else:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            try:
                data = json.loads(strip_code_fences(str(raw)))
            except ValueError as e:
                raise ContractViolation(f"Generation response is not valid JSON: {e}", _excerpt(raw)) from e

    try:
        artifacts = artifact_set_from_dict(data)
    except ContractViolation as e:
        raise ContractViolation(e.message, _excerpt(raw)) from e

    try:
        locators = json.loads(artifacts.locators.content)
    except ValueError as e:
        raise ContractViolation(f"locatorsContent is not valid JSON: {e}", _excerpt(raw)) from e
    if not isinstance(locators, dict):
        raise ContractViolation("locatorsContent must be a JSON object keyed by locator key.", _excerpt(raw))
    return artifacts


def enforce_required_basenames(artifacts: GenerationArtifactSet, names: ArtifactNames) -> GenerationArtifactSet:
    """Only basenames are honoured; a name that differs from the required one is replaced."""
    required = (
        (artifacts.spec, names.spec_basename),
        (artifacts.page, names.page_basename),
        (artifacts.locators, names.locators_basename),
    )
    for artifact, basename in required:
        suggested = Path(artifact.path.replace("\\", "/")).name
        if suggested != basename:
            logger.warning(f"Generation service proposed '{artifact.path}', using '{basename}'")
        artifact.path = basename
    return artifacts


def build_llm_client(cfg: GenerationConfig) -> AbstractLLMClient:
    if not cfg.apiKey:
        raise MissingCredential()
    if cfg.use_azure:
        return AzureLLMClient.from_config(cfg)
    return OpenAILLMClient.from_config(cfg)


class ArtifactGenerationOracle:
    """
    Sends one generation request per test case and validates the answer
    against the six-field artifact contract.
    """

    def __init__(self, cfg: GenerationConfig, llm_client: Optional[AbstractLLMClient] = None):
        self.cfg = cfg
        self.llm_client = llm_client
        self.system_prompt = get_ai_sys_role_for_artifact_generation()
        self.last_raw_response: Optional[str] = None

    def _client(self) -> AbstractLLMClient:
        if self.llm_client is None:
            self.llm_client = build_llm_client(self.cfg)
        return self.llm_client

    def generate(self, document: TestCaseDocument, actions: List[Action], names: ArtifactNames,
                 locator_keys: List[str], platform: str,
                 exemplars: Optional[List[Dict[str, str]]] = None,
                 captured: Optional[Dict[str, Dict[str, str]]] = None) -> GenerationArtifactSet:
        client = self._client()
        payload = build_generation_payload(document, actions, names, locator_keys, platform, exemplars, captured)
        messages = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": get_ai_user_role_for_artifact_generation(
                json.dumps(payload, indent=2, ensure_ascii=False))},
        ]
        print(f"Requesting generated artifacts for '{names.title}' ({len(actions)} action(s))")
        raw = client.execute_chat_completion_api(messages, response_format={"type": "text"},
                                                 temperature=self.cfg.temperature,
                                                 max_tokens=self.cfg.maxTokens, max_attempts=1)
        self.last_raw_response = raw if isinstance(raw, str) else json.dumps(raw)
        logger.info(f"Generation response received ({len(self.last_raw_response)} chars)")
        artifacts = parse_oracle_response(raw)
        return enforce_required_basenames(artifacts, names)
