"""
llm.py — Guided Component Forge
================================
Chat model access with bounded step-level retries.

Every LLM call in the pipeline goes through LLMClient.complete(): the same
messages are re-sent up to `max_attempts` times; when all attempts fail a
GenerationError is raised and the run is aborted.
"""

from functools import lru_cache

from langchain_core.globals import set_debug, set_verbose
from langchain_core.language_models import BaseChatModel
from langchain_groq import ChatGroq
from tenacity import Retrying, stop_after_attempt, wait_exponential_jitter

from codegen import config

set_debug(False)
set_verbose(False)


class GenerationError(RuntimeError):
    """A generation/evaluation step failed on every attempt."""

    def __init__(self, step: str, attempts: int, cause: BaseException) -> None:
        super().__init__(f"{step} failed after {attempts} attempt(s): {cause}")
        self.step = step
        self.attempts = attempts
        self.cause = cause


class EmptyResponseError(ValueError):
    """The model answered, but with nothing usable."""


@lru_cache(maxsize=1)
def get_llm() -> BaseChatModel:
    """Groq chat model shared by every step (created on first use)."""
    return ChatGroq(model=config.GROQ_MODEL, temperature=config.GROQ_TEMPERATURE)


class LLMClient:
    """
    Thin wrapper around a LangChain chat model.

    Args:
        llm:          Any BaseChatModel; defaults to the shared Groq model.
        max_attempts: Attempts per call before giving up.
        wait:         tenacity wait strategy between attempts.
    """

    def __init__(
        self,
        llm: BaseChatModel | None = None,
        max_attempts: int = config.LLM_MAX_ATTEMPTS,
        wait=None,
    ) -> None:
        self._llm = llm
        self.max_attempts = max_attempts
        self.wait = wait if wait is not None else wait_exponential_jitter(initial=0.5, max=4.0)

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = get_llm()
        return self._llm

    def _invoke(self, messages: list[dict]) -> str:
        response = self.llm.invoke(messages)
        content = response.content
        if isinstance(content, list):
            # Some providers return content blocks
            content = "".join(
                block if isinstance(block, str) else block.get("text", "")
                for block in content
            )
        text = (content or "").strip()
        if not text:
            raise EmptyResponseError("model returned an empty response")
        return text

    def complete(self, messages: list[dict], step: str = "llm") -> str:
        """Returns the raw (stripped) text of the reply, retrying on any failure."""
        attempt_no = 0
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=self.wait,
                reraise=True,
            ):
                with attempt:
                    attempt_no = attempt.retry_state.attempt_number
                    if attempt_no > 1:
                        print(f"[{step}] 🔄 Retrying LLM call (attempt {attempt_no}/{self.max_attempts})")
                    return self._invoke(messages)
        except Exception as exc:
            print(f"[{step}] ❌ LLM call failed after {attempt_no} attempt(s): {exc}")
            raise GenerationError(step, attempt_no, exc) from exc
