"""
upkg — Source package.

Modules:
    config   — StatusConfig dataclass + YAML loader/validation
    metrics  — StatusRecord computation (days since last update, counters)
    report   — Terminal renderer: status block, glyph bar, plain and JSON views
"""

__version__ = "0.1.0"
