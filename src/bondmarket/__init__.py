"""Interest-reserve math and on-chain bond market aggregation."""

__version__ = "0.1.0"
