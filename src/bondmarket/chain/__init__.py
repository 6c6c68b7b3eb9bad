"""Chain read layer -- Aptos fullnode access and boundary parsing."""

from bondmarket.chain.aptos_reader import AptosRestReader
from bondmarket.chain.reader import ChainReader
from bondmarket.chain.types import classify_error, parse_bond_list, parse_bond_record

__all__ = [
    "AptosRestReader",
    "ChainReader",
    "classify_error",
    "parse_bond_list",
    "parse_bond_record",
]
