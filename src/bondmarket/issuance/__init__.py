"""Bond issuance -- create-bond validation and entry-function payloads."""

from bondmarket.issuance.builder import (
    BondDraft,
    CreateBondRequest,
    estimate_interest_reserve,
    init_modules_payload,
    prepare_create_bond,
)

__all__ = [
    "BondDraft",
    "CreateBondRequest",
    "estimate_interest_reserve",
    "init_modules_payload",
    "prepare_create_bond",
]
