"""
Test suite for RMM engine

Contains:
- tests/unit/          : Unit tests for math, domain, pool, arbitrage and simulation
"""
