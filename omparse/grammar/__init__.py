# omparse/grammar/__init__.py
"""OpenMetrics structural grammar: parse tree nodes and the parser."""
