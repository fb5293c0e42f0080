# blockpilot/normalizer.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Turn raw session text into attributed messages.

Servers, chat plugins and bridges all format lines differently. Each
format is a rule: a function returning an InboundMessage or None. Rules
run in priority order and the first match wins. Support for a new
format is added by appending a rule.
"""

import json
import logging
import re
import string
from typing import Any, Callable, Iterable, Optional

from .models import InboundMessage, MessageKind

logger = logging.getLogger(__name__)

NAME = r"[A-Za-z0-9_]{1,16}"

FORMAT_CODE_RE = re.compile(r"§[0-9a-fk-orx]", re.IGNORECASE)
BRACKETED_RE = re.compile(rf"^<({NAME})>\s*(.*\S)\s*$")
COLON_RE = re.compile(rf"^({NAME}):\s*(.*\S)\s*$")
JOIN_LEAVE_RE = re.compile(rf"^({NAME}) (?:has )?(joined|left)\b", re.IGNORECASE)
BRIDGED_BODY_RE = re.compile(rf"^\s*({NAME})\s*(?:»|:)\s*(.*\S)\s*$")

DEFAULT_BRIDGE_TAG = "[discord]"
SPLIT_CHARS = set(string.whitespace) | set(string.punctuation) | {"»"}

Rule = Callable[[str, Optional[Iterable[str]], str], Optional[InboundMessage]]


def strip_format_codes(line: str) -> str:
    return FORMAT_CODE_RE.sub("", line)


def match_bracketed(line: str, online=None, bridge_tag: str = DEFAULT_BRIDGE_TAG) -> Optional[InboundMessage]:
    """``<name> text``"""
    m = BRACKETED_RE.match(line)
    if not m:
        return None
    return InboundMessage(actor=m.group(1), text=m.group(2))


def match_bridged(line: str, online=None, bridge_tag: str = DEFAULT_BRIDGE_TAG) -> Optional[InboundMessage]:
    """``[discord] name » text`` or ``[discord] name: text``"""
    if not bridge_tag or not line.lower().startswith(bridge_tag.lower()):
        return None
    m = BRIDGED_BODY_RE.match(line[len(bridge_tag):])
    if not m:
        return None
    return InboundMessage(actor=m.group(1), text=m.group(2))


def match_colon(line: str, online=None, bridge_tag: str = DEFAULT_BRIDGE_TAG) -> Optional[InboundMessage]:
    """``name: text``"""
    m = COLON_RE.match(line)
    if not m:
        return None
    return InboundMessage(actor=m.group(1), text=m.group(2))


def match_join_leave(line: str, online=None, bridge_tag: str = DEFAULT_BRIDGE_TAG) -> Optional[InboundMessage]:
    """``name has joined...`` / ``name left the game``"""
    m = JOIN_LEAVE_RE.match(line)
    if not m:
        return None
    return InboundMessage(actor=m.group(1), text=m.group(2).lower(), kind=MessageKind.SYSTEM)


def match_rich_text(line: str, online=None, bridge_tag: str = DEFAULT_BRIDGE_TAG) -> Optional[InboundMessage]:
    """A JSON text component; flatten it and retry the chat shapes."""
    stripped = line.strip()
    if not stripped or stripped[0] not in "{[":
        return None
    try:
        component = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    flat = strip_format_codes(flatten_component(component)).strip()
    if not flat:
        return None
    for rule in CHAT_RULES:
        message = rule(flat, online, bridge_tag)
        if message is not None:
            return message
    return None


def match_online_prefix(line: str, online=None, bridge_tag: str = DEFAULT_BRIDGE_TAG) -> Optional[InboundMessage]:
    """A known online name at the start of the line, followed by a separator."""
    if not online:
        return None
    for name in sorted(online, key=len, reverse=True):
        if not name or not line.startswith(name) or len(line) == len(name):
            continue
        if line[len(name)] not in SPLIT_CHARS:
            continue
        text = line[len(name):].lstrip(" \t:>»|-,.]").strip()
        if text:
            return InboundMessage(actor=name, text=text)
    return None


def flatten_component(component: Any) -> str:
    """Concatenate the text of a nested chat component."""
    if isinstance(component, str):
        return component
    if isinstance(component, list):
        return "".join(flatten_component(part) for part in component)
    if isinstance(component, dict):
        parts = [str(component.get("text", ""))]
        for key in ("with", "extra"):
            children = component.get(key)
            if isinstance(children, list):
                parts.extend(flatten_component(child) for child in children)
        return "".join(parts)
    return ""


CHAT_RULES: list[Rule] = [match_bracketed, match_bridged, match_colon]

RULES: list[Rule] = [
    match_bracketed,
    match_bridged,
    match_colon,
    match_join_leave,
    match_rich_text,
    match_online_prefix,
]


def normalize_line(
    raw: Any,
    online: Optional[Iterable[str]] = None,
    bridge_tag: str = DEFAULT_BRIDGE_TAG,
) -> Optional[InboundMessage]:
    """Attribute one raw line to an actor.

    Args:
        raw: A text line, or an already decoded rich-text component.
        online: Names currently known to be online, for the prefix heuristic.
        bridge_tag: Literal prefix marking bridged-channel lines.

    Returns:
        The attributed message, or None if the line is not addressable.
    """
    if isinstance(raw, (dict, list)):
        raw = json.dumps(raw)
    if not isinstance(raw, str):
        logger.debug(f"Ignoring non-text line: {raw!r}")
        return None

    line = strip_format_codes(raw).strip()
    if not line:
        return None

    online_names = list(online) if online is not None else None
    for rule in RULES:
        message = rule(line, online_names, bridge_tag)
        if message is not None:
            return message

    logger.debug(f"Unaddressed line: {line}")
    return None
