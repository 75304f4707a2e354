"""
Test suite for the options risk engine

Contains:
- tests/unit/          : Unit tests for math kernel, pricing, risk, gates and engine
"""
