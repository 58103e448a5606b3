from app.core.config import settings
from app.adapters.llm.base import LLM
from app.adapters.llm.openrouter import OpenRouterLLM
from app.adapters.llm.openai import OpenAILLM

def get_llm() -> LLM:
    if settings.LLM_PROVIDER == "openai":
        return OpenAILLM()
    return OpenRouterLLM()
