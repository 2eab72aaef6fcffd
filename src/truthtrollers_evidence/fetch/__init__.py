from truthtrollers_evidence.fetch.http import HttpFetcher, html_to_text

__all__ = [
    "HttpFetcher",
    "html_to_text",
]
