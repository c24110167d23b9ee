"""Heuristic detection rules applied to source text.

These are substring and regex heuristics, not a parser: ``Promise`` inside a
comment still tags a file as Promise-based.  Each rule is a table entry so it
can be inspected and tested on its own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class PatternRule:
    """Tag a file with *tag* when *needle* occurs anywhere in its text."""

    needle: str
    tag: str

    def matches(self, text: str) -> bool:
        return self.needle in text


PATTERN_RULES: tuple[PatternRule, ...] = (
    PatternRule("class ", "Object-Oriented"),
    PatternRule("interface ", "Interface-based"),
    PatternRule("async ", "Async/Await"),
    PatternRule("Promise", "Promise-based"),
    PatternRule("function*", "Generator-based"),
    PatternRule("Observable", "Reactive"),
    PatternRule("private ", "Encapsulation"),
    PatternRule("extends ", "Inheritance"),
    PatternRule("implements ", "Implementation"),
)

# Declarations whose identifier becomes a component name.
COMPONENT_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bclass\s+(\w+)"),
    re.compile(r"\binterface\s+(\w+)"),
    re.compile(r"\btype\s+(\w+)\s*="),
)

# Extensions whose files are scanned by the rules above.
SCRIPT_EXTENSIONS = (".ts", ".js")

# Known devDependencies, in reporting order.
BUILD_TOOLS: tuple[str, ...] = ("webpack", "rollup", "parcel", "esbuild", "vite")
TEST_FRAMEWORKS: tuple[str, ...] = ("jest", "mocha", "jasmine", "vitest", "ava")


def detect_patterns(text: str) -> list[str]:
    """Return the tags of every rule matching *text*, in table order."""
    return [rule.tag for rule in PATTERN_RULES if rule.matches(text)]


def detect_components(text: str) -> list[str]:
    """Return declared class, interface and type alias names, first-seen order."""
    found: dict[str, None] = {}
    for regex in COMPONENT_RULES:
        for match in regex.finditer(text):
            found.setdefault(match.group(1), None)
    return list(found)


def detect_known(dev_dependencies: dict[str, object], known: tuple[str, ...]) -> list[str]:
    """Return the *known* names present (with a truthy version) in *dev_dependencies*."""
    return [name for name in known if dev_dependencies.get(name)]
