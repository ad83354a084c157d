"""
gemini.py

Shared construction of the Gemini chat model used by the adapters.
"""

from langchain_google_genai import ChatGoogleGenerativeAI

from PODAssistant.config import GEMINI_API_KEY, LLM_MODEL, LLM_TEMPERATURE


def build_llm() -> ChatGoogleGenerativeAI:
    kwargs = {"model": LLM_MODEL, "temperature": LLM_TEMPERATURE}
    if GEMINI_API_KEY:
        kwargs["google_api_key"] = GEMINI_API_KEY
    return ChatGoogleGenerativeAI(**kwargs)
