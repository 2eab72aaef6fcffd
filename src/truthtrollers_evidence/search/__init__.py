from truthtrollers_evidence.search.exa import ExaSearcher
from truthtrollers_evidence.search.fanout import SearchFanout
from truthtrollers_evidence.search.hybrid import HybridSearch
from truthtrollers_evidence.search.tavily import TavilySearcher

__all__ = [
    "ExaSearcher",
    "HybridSearch",
    "SearchFanout",
    "TavilySearcher",
]
