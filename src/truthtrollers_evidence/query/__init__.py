from truthtrollers_evidence.query.base import QuerySynthesizer
from truthtrollers_evidence.query.llm import LLMQuerySynthesizer
from truthtrollers_evidence.query.local import LocalQuerySynthesizer, local_queries
from truthtrollers_evidence.query.suggest import QuerySuggester, SuggestStats

__all__ = [
    "LLMQuerySynthesizer",
    "LocalQuerySynthesizer",
    "QuerySuggester",
    "QuerySynthesizer",
    "SuggestStats",
    "local_queries",
]
