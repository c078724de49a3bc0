"""Rule-source registry and ordered rule compilation."""

from clashforge.rules.catalog import DEFAULT_CATALOG, DEFAULT_CUSTOM_RULES, RuleCatalog
from clashforge.rules.compiler import CompiledRules, RuleCompileError, compile_rules
from clashforge.rules.models import Behavior, RuleEntry, RuleSource, SourceFormat, Tier

__all__ = [
    "DEFAULT_CATALOG",
    "DEFAULT_CUSTOM_RULES",
    "Behavior",
    "CompiledRules",
    "RuleCatalog",
    "RuleCompileError",
    "RuleEntry",
    "RuleSource",
    "SourceFormat",
    "Tier",
    "compile_rules",
]
