"""Engine tuning knobs, loadable from YAML and environment variables."""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_PREFER_DOMAINS: tuple[str, ...] = (
    "apnews.com",
    "reuters.com",
    "bbc.com",
    "wikipedia.org",
    "fullfact.org",
    "snopes.com",
    "factcheck.org",
    "politifact.com",
)

# Later entries win, so CLAIM_CONCURRENCY overrides MAX_CONCURRENCY.
_ENV_FIELDS: tuple[tuple[str, str], ...] = (
    ("QUERIES_PER_CLAIM", "queries_per_claim"),
    ("SEARCH_RESULTS_PER_CLAIM", "search_results_per_claim"),
    ("PICKS_PER_CLAIM", "picks_per_claim"),
    ("MAX_CONCURRENCY", "max_concurrency"),
    ("CLAIM_CONCURRENCY", "max_concurrency"),
    ("REFINE_QUERIES_WITH_LLM", "refine_queries_with_llm"),
    ("PICK_WITH_LLM", "pick_with_llm"),
    ("STRICT_DOMAIN_FILTER", "strict_domain_filter"),
    ("CALL_TIMEOUT_S", "call_timeout_s"),
    ("QUERY_CACHE_TTL_S", "query_cache_ttl_s"),
    ("CLAIM_CHUNK_SIZE", "suggest_chunk_size"),
    ("PREFER_DOMAINS", "prefer_domains"),
)


class EngineSettings(BaseModel):
    """Limits and feature flags shared by every pipeline stage."""

    queries_per_claim: int = Field(default=4, ge=1)
    search_results_per_claim: int = Field(default=8, ge=1)
    picks_per_claim: int = Field(default=3, ge=1)
    max_concurrency: int = Field(default=4, ge=1)
    refine_queries_with_llm: bool = True
    pick_with_llm: bool = True
    strict_domain_filter: bool = False
    prefer_domains: tuple[str, ...] = DEFAULT_PREFER_DOMAINS
    call_timeout_s: float | None = Field(default=30.0, gt=0)
    query_cache_ttl_s: int = Field(default=86400, ge=0)
    suggest_chunk_size: int = Field(default=10, ge=1)
    evidence_per_doc: int = Field(default=2, ge=1)
    max_chars_per_doc: int = Field(default=8000, ge=1)
    max_evidence_candidates: int = Field(default=4, ge=1)

    model_config = {"frozen": True}

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        base: "EngineSettings | None" = None,
    ) -> "EngineSettings":
        """Overlay environment variables on ``base`` (or the defaults).

        Booleans accept the usual pydantic spellings ("true", "false", "1",
        "0"). ``PREFER_DOMAINS`` is comma-separated. ``CALL_TIMEOUT_S`` set to
        "0" or "none" disables the timeout.

        Raises:
            pydantic.ValidationError: If a variable has an invalid value.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = (base or cls()).model_dump()
        for var, field_name in _ENV_FIELDS:
            raw = env.get(var)
            if raw is None or raw.strip() == "":
                continue
            raw = raw.strip()
            if field_name == "prefer_domains":
                values[field_name] = tuple(d.strip() for d in raw.split(",") if d.strip())
            elif field_name == "call_timeout_s" and raw.lower() in ("0", "none", "off"):
                values[field_name] = None
            else:
                values[field_name] = raw
        return cls.model_validate(values)
