"""Plain HTTP full-text fetcher."""

import logging

import httpx
from bs4 import BeautifulSoup, Comment

from truthtrollers_evidence.data import CandidateDoc

logger = logging.getLogger(__name__)

_DROP_TAGS = ["script", "style", "noscript", "template"]
_BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "figcaption", "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr",
    "li", "main", "nav", "ol", "p", "pre", "section", "table", "td", "th", "tr", "ul",
]


def html_to_text(html: str) -> str:
    """Visible page text, one line per block element.

    Entities are decoded. Comments and script or style content are dropped. Inline
    markup such as links and emphasis stays on its line so quotes survive
    intact. Readable-content extraction is out of scope.
    """
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(_DROP_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for tag in soup.find_all(_BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")

    lines = (" ".join(line.split()) for line in soup.get_text().splitlines())
    return "\n".join(line for line in lines if line)


class HttpFetcher:
    """Fetch a candidate's page over HTTP and return its text.

    Non-HTML text responses are returned as-is, HTML has its tags
    stripped, and binary content yields the candidate's snippet.

    Args:
        timeout_s: Request timeout.
        max_chars: Maximum characters returned.
        user_agent: User-Agent header sent with requests.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 15.0,
        max_chars: int = 50_000,
        user_agent: str = "TruthTrollersEvidence/0.1",
    ) -> None:
        self._timeout_s = timeout_s
        self._max_chars = max_chars
        self._headers = {"User-Agent": user_agent}

    async def get_text(self, candidate: CandidateDoc) -> str:
        if not candidate.url:
            return candidate.snippet or ""

        async with httpx.AsyncClient(
            timeout=self._timeout_s, follow_redirects=True, headers=self._headers
        ) as client:
            response = await client.get(candidate.url)
            response.raise_for_status()

        content_type = response.headers.get("content-type", "").lower()
        if "html" in content_type:
            text = html_to_text(response.text)
        elif content_type.startswith("text/") or "json" in content_type or not content_type:
            text = response.text
        else:
            logger.info(f"Unsupported content type {content_type!r} for {candidate.url}")
            text = candidate.snippet or ""
        return text[: self._max_chars]
