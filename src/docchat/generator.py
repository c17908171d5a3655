"""
generator.py — Turn retrieved context into a chat answer
========================================================

Two answerers share one tiny interface:

  generate(context, pages, question) -> str     # or raise UpstreamError

  RemoteAnswerGenerator — sends the context to an LLM
  LocalAnswerGenerator  — deterministic, quotes/summarizes the context

The AnswerOrchestrator tries the remote one and drops to the local one
when it raises UpstreamError. The chat never dies because an API key
expired or Ollama isn't running; it just gets plainer answers.

Provider-agnostic LLM access, adapter pattern:
  - Anthropic Claude (native SDK)
  - OpenAI-compatible APIs (GPT, OpenRouter, DeepSeek, etc.)
  - Ollama (local models, no API key needed)

API keys:
  export ANTHROPIC_API_KEY="sk-ant-..."       # Claude
  export OPENAI_API_KEY="sk-..."              # OpenAI
  export OPENROUTER_API_KEY="sk-or-..."       # OpenRouter
  export DEEPSEEK_API_KEY="sk-..."            # DeepSeek

Usage:
  from docchat.generator import AnswerOrchestrator, RemoteAnswerGenerator, create_backend
  remote = RemoteAnswerGenerator(create_backend("claude", "claude-sonnet-4-20250514"))
  bot = AnswerOrchestrator(primary=remote)
  answer = bot.answer(context_result, "what are bots?")
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Protocol
from urllib.parse import quote

from docchat.context import ContextResult

logger = logging.getLogger("docchat.generator")


EMPTY_DOCUMENT_ANSWER = (
    "I don't see any content to work with in the document yet. "
    "Could you try uploading a document first?"
)
NO_MATCH_ANSWER = (
    "I couldn't find anything about \"{question}\" in this document. "
    "Could you try rephrasing, or ask about another topic it covers?"
)


# ==================== ERRORS & INTERFACE ====================

class UpstreamError(Exception):
    """The remote answer generator failed or returned something unusable."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class AnswerGenerator(Protocol):
    name: str

    def generate(self, context: str, pages: list[int], question: str) -> str:
        ...


# ==================== PROMPT ====================

SYSTEM_PROMPT = """You are a friendly assistant that answers questions about a document the user uploaded, based ONLY on the provided excerpts.

Rules:
1. Answer using ONLY information from the excerpts.
2. If the excerpts do not contain the answer, say so plainly and suggest what the user could ask instead.
3. Do NOT use knowledge from outside the excerpts.
4. When page numbers are given, mention the pages your answer comes from.
5. Be concise. Don't repeat the question."""


def build_user_message(context: str, pages: list[int], question: str) -> str:
    """Build user message. Question goes after context (recency bias)."""
    if pages:
        where = f"Pages: {', '.join(str(p) for p in pages)}"
    else:
        where = "Pages: unknown"
    return f"""Excerpts from the document ({where}):

{context}

---

Question: {question}

Answer the question using ONLY the excerpts above."""


def format_pages(pages: list[int]) -> str:
    """'page 3' / 'pages 2, 5' — empty string when there are none."""
    if not pages:
        return ""
    label = "pages" if len(pages) > 1 else "page"
    return f"{label} {', '.join(str(p) for p in pages)}"


# ==================== LLM BACKENDS ====================

class LLMBackend(ABC):
    """
    Abstract base for LLM providers.

    Every backend implements one method: call().
    Takes system prompt + user message, returns (text, usage_dict).
    SDK failures come out as UpstreamError, never as SDK exceptions.
    """

    @abstractmethod
    def call(self, system: str, user: str) -> tuple[str, dict]:
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        ...


class ClaudeBackend(LLMBackend):
    """Anthropic Claude via native SDK."""

    def __init__(self, model: str, max_tokens: int, temperature: float,
                 api_key: str | None = None):
        import anthropic

        api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY not set.\n"
                "  export ANTHROPIC_API_KEY='sk-ant-...'"
            )
        self.client = anthropic.Anthropic(api_key=api_key)
        self._sdk_error = anthropic.AnthropicError
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    @property
    def name(self) -> str:
        return "claude"

    def call(self, system: str, user: str) -> tuple[str, dict]:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system,
                messages=[{"role": "user", "content": user}],
            )
        except self._sdk_error as e:
            raise UpstreamError(self.name, str(e)) from e

        if not response.content or not hasattr(response.content[0], "text"):
            raise UpstreamError(self.name, "response has no text content")
        text = response.content[0].text
        usage = {
            "input_tokens": response.usage.input_tokens,
            "output_tokens": response.usage.output_tokens,
        }
        return text, usage


class OpenAIBackend(LLMBackend):
    """
    OpenAI-compatible API — anything that speaks /v1/chat/completions:
      - OpenAI:      https://api.openai.com/v1
      - OpenRouter:  https://openrouter.ai/api/v1
      - DeepSeek:    https://api.deepseek.com/v1
      - Local vLLM:  http://localhost:8000/v1
    """

    def __init__(self, model: str, max_tokens: int, temperature: float,
                 base_url: str | None = None, api_key: str | None = None):
        import openai

        if api_key is None:
            if base_url and "openrouter" in base_url:
                api_key = os.environ.get("OPENROUTER_API_KEY")
            elif base_url and "deepseek" in base_url:
                api_key = os.environ.get("DEEPSEEK_API_KEY")
            if not api_key:
                api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "No API key found. Set one of:\n"
                "  export OPENAI_API_KEY='...'\n"
                "  export OPENROUTER_API_KEY='...'\n"
                "  export DEEPSEEK_API_KEY='...'"
            )

        kwargs = {"api_key": api_key}
        if base_url:
            kwargs["base_url"] = base_url
        self.client = openai.OpenAI(**kwargs)
        self._sdk_error = openai.OpenAIError
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._base_url = base_url or "openai"

    @property
    def name(self) -> str:
        for keyword in ["openrouter", "deepseek", "localhost"]:
            if keyword in self._base_url:
                return keyword
        return "openai"

    def call(self, system: str, user: str) -> tuple[str, dict]:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            )
        except self._sdk_error as e:
            raise UpstreamError(self.name, str(e)) from e

        if not response.choices:
            raise UpstreamError(self.name, "response has no choices")
        text = response.choices[0].message.content
        usage = {}
        if response.usage:
            usage = {
                "input_tokens": response.usage.prompt_tokens,
                "output_tokens": response.usage.completion_tokens,
            }
        return text, usage


class OllamaBackend(OpenAIBackend):
    """
    Ollama for local models — no API key, no cost, the document never
    leaves the machine.

    ollama pull llama3.1
    Then it just works at localhost:11434.
    """

    def __init__(self, model: str, max_tokens: int, temperature: float,
                 host: str = "http://localhost:11434"):
        # Ollama ignores the key but the SDK requires one
        super().__init__(model, max_tokens, temperature,
                         base_url=f"{host}/v1", api_key="ollama")

    @property
    def name(self) -> str:
        return "ollama"


# ==================== PRESETS ====================

PRESETS = {
    # --- Anthropic ---
    "claude":       {"provider": "claude",  "model": "claude-sonnet-4-20250514"},
    "claude-haiku": {"provider": "claude",  "model": "claude-haiku-4-5-20251001"},

    # --- OpenAI ---
    "gpt4o":        {"provider": "openai",  "model": "gpt-4o"},
    "gpt4o-mini":   {"provider": "openai",  "model": "gpt-4o-mini"},

    # --- DeepSeek ---
    "deepseek":     {"provider": "openai",  "model": "deepseek-chat",
                     "base_url": "https://api.deepseek.com/v1"},

    # --- Local (Ollama) ---
    "llama3":       {"provider": "ollama",  "model": "llama3.1"},
    "mistral":      {"provider": "ollama",  "model": "mistral"},
    "qwen":         {"provider": "ollama",  "model": "qwen2.5"},
}


def list_presets() -> str:
    """List available model presets."""
    lines = ["Available presets:"]
    for name, cfg in PRESETS.items():
        url = cfg.get("base_url", "")
        extra = f"  ({url})" if url else ""
        lines.append(f"  {name:<16} {cfg['provider']:<8} {cfg['model']}{extra}")
    return "\n".join(lines)


def create_backend(
    provider: str,
    model: str,
    max_tokens: int = 1024,
    temperature: float = 0.0,
    base_url: str | None = None,
    api_key: str | None = None,
) -> LLMBackend:
    """Factory — create the right backend from provider string."""
    if provider == "claude":
        return ClaudeBackend(model, max_tokens, temperature, api_key)
    elif provider == "openai":
        return OpenAIBackend(model, max_tokens, temperature, base_url, api_key)
    elif provider == "ollama":
        return OllamaBackend(model, max_tokens, temperature)
    else:
        raise ValueError(f"Unknown provider: {provider!r}. Use: claude, openai, ollama")


def backend_from_preset(preset: str, **kwargs) -> LLMBackend:
    if preset not in PRESETS:
        raise ValueError(f"Unknown preset: {preset!r}\n{list_presets()}")
    cfg = PRESETS[preset]
    return create_backend(
        provider=cfg["provider"], model=cfg["model"],
        base_url=cfg.get("base_url"), **kwargs,
    )


# ==================== ANSWERERS ====================

class RemoteAnswerGenerator:
    """Answers through an LLMBackend. Raises UpstreamError on any failure."""

    def __init__(self, backend: LLMBackend, max_context_chars: int = 16000):
        self.backend = backend
        self.max_context_chars = max_context_chars
        self.last_usage: dict = {}

    @property
    def name(self) -> str:
        return self.backend.name

    def generate(self, context: str, pages: list[int], question: str) -> str:
        if len(context) > self.max_context_chars:
            logger.info("Context trimmed: %d → %d chars", len(context), self.max_context_chars)
            context = context[:self.max_context_chars]

        user_message = build_user_message(context, pages, question)
        logger.debug("Calling %s", self.backend.name)
        text, usage = self.backend.call(SYSTEM_PROMPT, user_message)

        if not isinstance(text, str) or not text.strip():
            raise UpstreamError(self.backend.name, "empty or malformed answer")
        self.last_usage = usage
        return text.strip()


def identify_question_type(question: str) -> str:
    """'summary', 'specific' (has a question word) or 'general'."""
    question = question.lower()
    if "summarize" in question or "summary" in question:
        return "summary"
    if any(w in question for w in ("what", "when", "where", "who", "how", "why")):
        return "specific"
    return "general"


def summarize_context(context: str) -> str:
    """First paragraph as the lead, the rest as key-point bullets."""
    paragraphs = [p.strip() for p in context.split("\n\n") if p.strip()]
    if len(paragraphs) <= 1:
        return context
    bullets = "\n".join(f"• {p}" for p in paragraphs[1:])
    return f"{paragraphs[0]}\n\nKey points:\n{bullets}"


class LocalAnswerGenerator:
    """Deterministic answerer: shapes the context itself into a reply."""

    name = "local"

    def generate(self, context: str, pages: list[int], question: str) -> str:
        kind = identify_question_type(question)
        if kind == "summary":
            response = "Here's a summary:\n\n" + summarize_context(context)
        elif kind == "specific":
            response = "I found this specific information:\n\n" + context
        else:
            response = "Based on the document:\n\n" + context

        if pages:
            response += f"\n\nThis information can be found on {format_pages(pages)}."
        return response + "\n\nLet me know if you'd like to know more!"


# ==================== ORCHESTRATION ====================

def find_external_resources(topic: str) -> dict:
    """Search links for reading beyond the document."""
    encoded = quote(topic, safe="-_.!~*'()")
    return {
        "google": f"https://www.google.com/search?q={encoded}",
        "youtube": f"https://www.youtube.com/results?search_query={encoded}",
    }


def external_resources_section(topic: str) -> str:
    links = find_external_resources(topic)
    return (
        "\n\nExternal resources for further study:\n"
        f"- [Google Search]({links['google']})\n"
        f"- [YouTube Videos]({links['youtube']})"
    )


@dataclass
class Answer:
    """What the chat shows, plus where it came from."""
    question: str
    text: str
    pages: list[int] = field(default_factory=list)
    provider: str = ""
    used_fallback: bool = False
    error: str = ""
    usage: dict = field(default_factory=dict)


class AnswerOrchestrator:
    """
    Primary generator with a local fallback.

    primary=None means "local only" (no key configured, offline use).
    """

    def __init__(self, primary: AnswerGenerator | None = None,
                 fallback: AnswerGenerator | None = None,
                 include_resources: bool = True):
        self.primary = primary
        self.fallback = fallback or LocalAnswerGenerator()
        self.include_resources = include_resources

    def answer(self, result: ContextResult, question: str) -> Answer:
        if result.is_empty:
            return Answer(question=question, text=EMPTY_DOCUMENT_ANSWER, provider="none")
        if result.is_no_match:
            return Answer(question=question, text=NO_MATCH_ANSWER.format(question=question),
                          provider="none")

        used_fallback = False
        error = ""
        generator = self.primary or self.fallback
        try:
            text = generator.generate(result.context, result.pages, question)
        except UpstreamError as e:
            logger.warning("Answer generator %s failed, using local answer: %s", e.provider, e.message)
            used_fallback = True
            error = str(e)
            generator = self.fallback
            text = generator.generate(result.context, result.pages, question)

        if self.include_resources:
            text += external_resources_section(question)

        return Answer(
            question=question, text=text, pages=list(result.pages),
            provider=generator.name, used_fallback=used_fallback, error=error,
            usage=dict(getattr(generator, "last_usage", {})),
        )


# ==================== DISPLAY ====================

def print_answer(answer: Answer):
    """Pretty-print an answer with its provenance."""
    print(f"\n{'='*70}")
    print("  ANSWER")
    print(f"{'='*70}")
    print(f"\n{answer.text}")

    print(f"\n{'─'*70}")
    print(f"  Provider: {answer.provider} | Pages: {format_pages(answer.pages) or '—'}")
    if answer.usage:
        inp = answer.usage.get("input_tokens", "?")
        out = answer.usage.get("output_tokens", "?")
        print(f"  Tokens: {inp} in, {out} out")
    if answer.used_fallback:
        print(f"  ⚠ Remote model unavailable ({answer.error}); answered locally.")
