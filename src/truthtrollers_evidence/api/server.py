"""FastAPI server exposing claim mapping, query suggestions and deep evidence mapping.

Usage:
    uvicorn truthtrollers_evidence.api.server:create_app --factory --port 8000
"""

import dataclasses
import logging
import time
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from truthtrollers_evidence.config.factory import create_from_config
from truthtrollers_evidence.config.loader import get_default_config_path, load_config
from truthtrollers_evidence.config.models import TruthTrollersConfig
from truthtrollers_evidence.data import Claim, MapClaimsResult
from truthtrollers_evidence.errors import InvalidClaimsError
from truthtrollers_evidence.pipeline.engine import EvidenceEngine
from truthtrollers_evidence.pipeline.mapper import ClaimMapper
from truthtrollers_evidence.query.suggest import QuerySuggester

logger = logging.getLogger(__name__)


# Request models
class MapClaimsRequest(BaseModel):
    claims: Any = None
    prefer_domains: list[str] | None = None
    avoid_domains: list[str] | None = None
    return_queries: bool = True


class SuggestQueriesRequest(BaseModel):
    claims: Any = None


class MapEvidenceRequest(BaseModel):
    claims: Any = None
    contexts: dict[str, Any] | None = None
    enable_web: bool = True
    enable_internal: bool = True
    enable_red_team: bool = False
    prefer_domains: list[str] | None = None
    avoid_domains: list[str] | None = None


def map_claims_payload(result: MapClaimsResult) -> dict[str, Any]:
    """Render a map-claims result as the response body.

    ``queries`` is omitted from items that were built without them.
    """
    items = []
    for item in result.items:
        body = dataclasses.asdict(item)
        if body["queries"] is None:
            del body["queries"]
        items.append(body)
    return {
        "success": result.success,
        "items": items,
        "references": [dataclasses.asdict(r) for r in result.references],
        "took_ms": result.took_ms,
        "meta": result.meta,
    }


def _engine_claims(raw_claims: Any) -> list[Claim]:
    if not isinstance(raw_claims, list):
        return []
    claims: list[Claim] = []
    for i, raw in enumerate(raw_claims):
        if isinstance(raw, str):
            text, claim_id, language, source_id = raw, None, None, None
        elif isinstance(raw, dict) and isinstance(raw.get("text"), str):
            text = raw["text"]
            claim_id = raw.get("id")
            language = raw.get("language")
            source_id = raw.get("source_content_id")
        else:
            continue
        if not text.strip():
            continue
        claims.append(
            Claim(
                id=str(claim_id) if claim_id is not None else f"c{i}",
                text=text.strip(),
                language=language,
                source_content_id=str(source_id) if source_id is not None else None,
            )
        )
    return claims


def _invalid(error: InvalidClaimsError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": str(error)})


def _failed(error: Exception, t_start: float) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content={
            "success": False,
            "error": str(error) or type(error).__name__,
            "took_ms": round((time.monotonic() - t_start) * 1000),
        },
    )


def create_app(
    mapper: ClaimMapper | None = None,
    engine: EvidenceEngine | None = None,
    suggester: QuerySuggester | None = None,
    *,
    config: TruthTrollersConfig | None = None,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Build the HTTP app.

    Components not passed in are created from ``config``, or from the
    default config file when no config is given. Run logging is off for the
    server since a RunLogger records one run at a time.
    """
    if mapper is None or engine is None or suggester is None:
        config = config or load_config(get_default_config_path())
        built_mapper, built_engine, built_suggester, _ = create_from_config(
            config, log_override=False
        )
        mapper = mapper or built_mapper
        engine = engine or built_engine
        suggester = suggester or built_suggester

    app = FastAPI(
        title="TruthTrollers Evidence API",
        description="Map claims to search queries, evidence picks and references",
        version="0.1.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/map-claims")
    async def map_claims(request: MapClaimsRequest) -> Any:
        t_start = time.monotonic()
        try:
            result = await mapper.map_claims(
                request.claims,
                prefer_domains=request.prefer_domains,
                avoid_domains=request.avoid_domains,
                return_queries=request.return_queries,
            )
        except InvalidClaimsError as e:
            return _invalid(e)
        except Exception as e:
            logger.exception("map-claims failed")
            return _failed(e, t_start)
        return map_claims_payload(result)

    @app.post("/suggest-queries")
    async def suggest_queries(request: SuggestQueriesRequest) -> Any:
        t_start = time.monotonic()
        claims = request.claims if isinstance(request.claims, list) else []
        try:
            suggestions, stats = await suggester.suggest(claims)
        except InvalidClaimsError as e:
            return _invalid(e)
        except Exception as e:
            logger.exception("suggest-queries failed")
            return _failed(e, t_start)
        return {
            "success": True,
            "items": [dataclasses.asdict(s) for s in suggestions],
            "took_ms": round((time.monotonic() - t_start) * 1000),
            "meta": dataclasses.asdict(stats),
        }

    @app.post("/map-evidence")
    async def map_evidence(request: MapEvidenceRequest) -> Any:
        t_start = time.monotonic()
        claims = _engine_claims(request.claims)
        if not claims:
            return _invalid(InvalidClaimsError())
        try:
            results = await engine.run(
                claims,
                request.contexts,
                enable_web=request.enable_web,
                enable_internal=request.enable_internal,
                enable_red_team=request.enable_red_team,
                prefer_domains=request.prefer_domains,
                avoid_domains=request.avoid_domains,
            )
        except Exception as e:
            logger.exception("map-evidence failed")
            return _failed(e, t_start)
        return {
            "success": True,
            "results": [dataclasses.asdict(r) for r in results],
            "took_ms": round((time.monotonic() - t_start) * 1000),
        }

    return app
