"""HTTP interface."""

from truthtrollers_evidence.api.server import create_app, map_claims_payload

__all__ = ["create_app", "map_claims_payload"]
