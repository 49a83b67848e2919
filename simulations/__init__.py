# simulations/__init__.py
"""
Command-line glue around the coin flip simulation core.

Run via:
    python -m simulations.report 3 8000 [--seed ...] [--format json] [--plot]
"""
