#!/usr/bin/env python
"""CLI for the TruthTrollers claim-to-evidence engine."""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, field_validator

from truthtrollers_evidence.api.server import map_claims_payload
from truthtrollers_evidence.config import create_from_config, get_default_config_path, load_config
from truthtrollers_evidence.data import Claim

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    claims: list[str]
    config: Path
    prefer_domains: list[str] | None = None
    avoid_domains: list[str] = []
    return_queries: bool = True
    evidence: bool = False
    log: bool = False
    log_dir: str = "logs"

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v


async def run(args: CLIArgs) -> None:
    """Map the claims with the given configuration and print JSON to stdout.

    Args:
        args: Validated CLI arguments.
    """
    config = load_config(args.config)
    mapper, engine, _suggester, run_logger = create_from_config(
        config,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )

    logger.info(f"Mapping {len(args.claims)} claims")
    logger.info(f"Config: {args.config}")

    if args.evidence:
        claims = [Claim(id=f"c{i}", text=text) for i, text in enumerate(args.claims)]
        results = await engine.run(
            claims, prefer_domains=args.prefer_domains, avoid_domains=args.avoid_domains
        )
        for r in results:
            adj = r.adjudication
            logger.info(
                f"{r.claim.id}: {adj.final_verdict} ({adj.confidence:.2f}), "
                f"{len(r.evidence)} quotes from {len(r.candidates)} candidates"
            )
        output = [dataclasses.asdict(r) for r in results]
    else:
        result = await mapper.map_claims(
            args.claims,
            prefer_domains=args.prefer_domains,
            avoid_domains=args.avoid_domains,
            return_queries=args.return_queries,
        )
        logger.info(
            f"Found {len(result.references)} unique references in {result.took_ms} ms"
        )
        output = map_claims_payload(result)

    print(json.dumps(output, indent=2, default=str))

    if run_logger and run_logger.last_log_path:
        logger.info(f"\nRun log written to: {run_logger.last_log_path}")


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Map claims to search evidence.")
    parser.add_argument(
        "claims",
        nargs="+",
        help="Claim texts to map",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--prefer-domain",
        action="append",
        default=None,
        dest="prefer_domains",
        help="Preferred domain; repeatable (default: the configured allowlist)",
    )
    parser.add_argument(
        "--avoid-domain",
        action="append",
        default=[],
        dest="avoid_domains",
        help="Domain to exclude from search; repeatable",
    )
    parser.add_argument(
        "--no-queries",
        action="store_true",
        default=False,
        help="Omit the queries used for each claim from the output",
    )
    parser.add_argument(
        "--evidence",
        action="store_true",
        default=False,
        help="Run the deep evidence engine (quotes and verdicts) instead",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Enable intermediate pipeline logging to JSON file",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for log files (default: logs/)",
    )

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            claims=ns.claims,
            config=config_path,
            prefer_domains=ns.prefer_domains,
            avoid_domains=ns.avoid_domains,
            return_queries=not ns.no_queries,
            evidence=ns.evidence,
            log=ns.log,
            log_dir=ns.log_dir,
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
