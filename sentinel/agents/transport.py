"""
sentinel.agents.transport — How a message reaches an upstream agent.

Two transports share one contract, ``send(message, agent_id) -> AgentResponse``:

  HttpAgentTransport    POSTs to an agent gateway (aiohttp)
  OllamaAgentTransport  answers locally with an Ollama model, using a
                        role-specific system prompt per agent id

Transports never raise for upstream trouble; every failure comes back as an
AgentResponse with success=False and a message for the operator.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from typing import Optional, Protocol

import aiohttp

from sentinel.utils.config import AgentConfig, LLMConfig
from sentinel.utils.enums import AgentRole
from sentinel.utils.types import AgentResponse

logger = logging.getLogger(__name__)


class AgentTransport(Protocol):
    async def send(self, message: str, agent_id: str) -> AgentResponse: ...


def extract_json(text: str) -> Optional[dict]:
    """Extract a JSON object from model output, handling markdown fences."""
    try:
        data = json.loads(text)
        return data if isinstance(data, dict) else None
    except json.JSONDecodeError:
        pass

    match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass

    logger.error("Failed to parse agent output as JSON: %s", text[:200])
    return None


# ── HTTP gateway ─────────────────────────────────────────────────────────────


def parse_envelope(payload: object, latency_ms: float = 0.0) -> AgentResponse:
    """Normalize the gateway envelope.

    Expected shape: {"success": bool, "response": {"status", "result", "message"}}.
    A string result is treated as raw model output and parsed for JSON.
    """
    if not isinstance(payload, dict):
        return AgentResponse(success=False, message="Malformed agent response")

    body = payload.get("response") or {}
    if not isinstance(body, dict):
        return AgentResponse(success=False, message="Malformed agent response")

    result = body.get("result")
    if isinstance(result, str):
        result = extract_json(result)

    return AgentResponse(
        success=bool(payload.get("success", False)),
        status=str(body.get("status", "error")),
        result=result if isinstance(result, dict) else None,
        message=str(body.get("message") or payload.get("error") or ""),
        latency_ms=latency_ms,
    )


class HttpAgentTransport:
    """Agent gateway client. One POST per call, no retry."""

    def __init__(self, config: AgentConfig):
        self.config = config
        self.endpoint = config.base_url.rstrip("/") + "/agent"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def send(self, message: str, agent_id: str) -> AgentResponse:
        start = time.time()
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.endpoint,
                    json={"message": message, "agent_id": agent_id},
                    headers=self._headers(),
                    timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
                ) as resp:
                    latency = (time.time() - start) * 1000
                    try:
                        payload = await resp.json(content_type=None)
                    except (json.JSONDecodeError, aiohttp.ContentTypeError):
                        payload = None
                    if resp.status != 200 and not isinstance(payload, dict):
                        return AgentResponse(
                            success=False,
                            message=f"Agent gateway returned HTTP {resp.status}",
                            latency_ms=latency,
                        )
                    response = parse_envelope(payload, latency)
                    logger.info(
                        "Agent %s replied in %.0fms: status=%s",
                        agent_id[:8],
                        latency,
                        response.status,
                        extra={"agent_id": agent_id},
                    )
                    return response
        except asyncio.TimeoutError:
            logger.error(
                "Agent %s timed out after %.0fs",
                agent_id[:8],
                self.config.timeout_seconds,
                extra={"agent_id": agent_id},
            )
            return AgentResponse(success=False, message="Agent request timed out")
        except aiohttp.ClientError as e:
            logger.error(
                "Agent %s unreachable: %s", agent_id[:8], e, extra={"agent_id": agent_id}
            )
            return AgentResponse(success=False, message="Network error occurred")


# ── Local Ollama ─────────────────────────────────────────────────────────────

WORKER_PROMPT = """You are a planning agent. Turn the user's task into an execution plan.

Respond ONLY with a JSON object. No other text.

Format:
{"plan": {"steps": [{"step_number": 1, "action": "what to do", "action_tag": "READ|WRITE|DELETE|EXTERNAL_CALL|PAYMENT|COMMUNICATION|OTHER", "concerns": ["possible problems"]}], "resources_needed": ["..."], "external_systems": ["..."]}}
"""

SENTINEL_PROMPT = """You are a risk assessor. Score the plan you receive on six dimensions.

Each score is an integer 0-3: 0 none, 1 low, 2 elevated, 3 critical.
Dimensions: irreversibility, external_impact, financial, safety, missing_context, policy_violation.

Respond ONLY with a JSON object. No other text.

Format:
{"risk_scores": {"irreversibility": 0, "external_impact": 0, "financial": 0, "safety": 0, "missing_context": 0, "policy_violation": 0}, "risk_explanations": {"irreversibility": "why", "external_impact": "why", "financial": "why", "safety": "why", "missing_context": "why", "policy_violation": "why"}}
"""

ROLE_PROMPTS: dict[AgentRole, str] = {
    AgentRole.WORKER: WORKER_PROMPT,
    AgentRole.SENTINEL: SENTINEL_PROMPT,
}


class OllamaAgentTransport:
    """Serves both agent roles from a local model."""

    def __init__(self, config: LLMConfig, roles: dict[str, AgentRole]):
        self.config = config
        self.roles = roles
        self._client = None
        self._init_client()

    def _init_client(self):
        try:
            import ollama

            self._client = ollama.AsyncClient(host=self.config.base_url)
            logger.info("Ollama client initialized: %s", self.config.base_url)
        except Exception as e:
            logger.error("Ollama client init failed: %s", e)

    async def send(self, message: str, agent_id: str) -> AgentResponse:
        role = self.roles.get(agent_id)
        if role is None:
            return AgentResponse(success=False, message=f"Unknown agent: {agent_id}")
        if self._client is None:
            return AgentResponse(success=False, message="Ollama client unavailable")

        start = time.time()
        try:
            response = await asyncio.wait_for(
                self._client.chat(
                    model=self.config.model,
                    messages=[
                        {"role": "system", "content": ROLE_PROMPTS[role]},
                        {"role": "user", "content": message},
                    ],
                    options={
                        "temperature": self.config.temperature,
                        "num_predict": self.config.num_predict,
                        "num_ctx": self.config.num_ctx,
                    },
                    format="json",
                ),
                timeout=self.config.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Ollama call for %s timed out after %ds",
                role.value,
                self.config.timeout_seconds,
            )
            return AgentResponse(success=False, message="Agent request timed out")
        except Exception as e:
            logger.error("Ollama call for %s failed: %s", role.value, e)
            return AgentResponse(success=False, message="Network error occurred")

        latency = (time.time() - start) * 1000
        result = extract_json(response["message"]["content"])
        if result is None:
            return AgentResponse(
                success=True,
                status="error",
                message="Agent returned unparseable output",
                latency_ms=latency,
            )
        logger.info("Ollama %s replied in %.0fms", role.value, latency)
        return AgentResponse(
            success=True, status="success", result=result, latency_ms=latency
        )


def build_transport(agents: AgentConfig, llm: LLMConfig) -> AgentTransport:
    if agents.transport == "ollama":
        roles = {
            agents.worker_agent_id: AgentRole.WORKER,
            agents.sentinel_agent_id: AgentRole.SENTINEL,
        }
        return OllamaAgentTransport(llm, roles)
    if agents.transport == "http":
        return HttpAgentTransport(agents)
    raise ValueError(f"Unknown agent transport: {agents.transport!r}")
