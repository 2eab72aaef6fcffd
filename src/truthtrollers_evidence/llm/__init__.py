"""JSON LLM adapters."""

from truthtrollers_evidence.llm.claude import ClaudeJsonLLM
from truthtrollers_evidence.llm.openai import OpenAIJsonLLM
from truthtrollers_evidence.llm.parsing import parse_json_object, strip_code_fences

__all__ = [
    "ClaudeJsonLLM",
    "OpenAIJsonLLM",
    "parse_json_object",
    "strip_code_fences",
]
