# seo_scout/crawler/robots.py
"""
Parser and checker for robots.txt rules (RFC 9309 subset).

The longest matching rule wins; on a tie ``Allow`` beats ``Disallow``.
An empty ``Disallow`` allows everything.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

__all__ = ["RobotsTxtRules"]

_WILDCARD_RE = re.compile(r"[*$]")


@dataclass
class _Group:
    agents: List[str] = field(default_factory=list)
    rules: List[Tuple[bool, str]] = field(default_factory=list)


class RobotsTxtRules:
    """Parsed robots.txt. ``can_fetch`` answers for one user agent and path."""

    def __init__(self, text: str) -> None:
        self.groups: List[_Group] = []
        self._regex_cache: Dict[str, re.Pattern[str]] = {}
        self._parse(text)

    def can_fetch(self, user_agent: str, path: str) -> bool:
        group = self._match_group(user_agent)
        if group is None:
            return True
        best_len = -1
        allowed = True
        for allow, pattern in group.rules:
            if not self._match_path(path or "/", pattern):
                continue
            length = len(_WILDCARD_RE.sub("", pattern))
            if length > best_len or (length == best_len and allow):
                best_len = length
                allowed = allow
        return allowed

    def _parse(self, text: str) -> None:
        current: Optional[_Group] = None
        for raw in text.splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line or ":" not in line:
                continue
            key, _, val = line.partition(":")
            key = key.strip().lower()
            val = val.strip()
            if key == "user-agent":
                # consecutive User-agent lines share one group
                if current is None or current.rules:
                    current = _Group()
                    self.groups.append(current)
                current.agents.append(val.lower())
            elif key in ("allow", "disallow"):
                if current is None:
                    current = _Group(agents=["*"])
                    self.groups.append(current)
                if key == "disallow" and not val:
                    continue
                current.rules.append((key == "allow", val))

    def _match_group(self, user_agent: str) -> Optional[_Group]:
        # product token only: "SEOScoutBot/1.0 (...)" -> "seoscoutbot"
        ua = user_agent.lower()
        for group in self.groups:
            if any(a != "*" and a and a in ua for a in group.agents):
                return group
        for group in self.groups:
            if "*" in group.agents:
                return group
        return None

    def _match_path(self, path: str, pattern: str) -> bool:
        regex = self._regex_cache.get(pattern)
        if regex is None:
            anchored = pattern.endswith("$")
            body = re.escape(pattern[:-1] if anchored else pattern).replace(r"\*", ".*")
            regex = re.compile("^" + body + ("$" if anchored else ""))
            self._regex_cache[pattern] = regex
        return bool(regex.match(path))
