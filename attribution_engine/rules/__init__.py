from attribution_engine.rules.loader import DEFAULT_RULES_PATH, load_rules, parse_rules
from attribution_engine.rules.models import Rules

__all__ = ["DEFAULT_RULES_PATH", "Rules", "load_rules", "parse_rules"]
