# blockpilot/patterns.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Regular expression patterns for owner commands and instruction parsing."""

import re

# Owner list management
# <call-name> trust <player>
TRUST_PATTERN = re.compile(r"\btrust\s+([A-Za-z0-9_]{1,16})\b", re.IGNORECASE)
# <call-name> untrust|distrust <player>
UNTRUST_PATTERN = re.compile(r"\b(?:untrust|distrust)\s+([A-Za-z0-9_]{1,16})\b", re.IGNORECASE)
# <call-name> ignore <player>
IGNORE_PATTERN = re.compile(r"\bignore\s+([A-Za-z0-9_]{1,16})\b", re.IGNORECASE)
# <call-name> unignore <player>
UNIGNORE_PATTERN = re.compile(r"\bunignore\s+([A-Za-z0-9_]{1,16})\b", re.IGNORECASE)
# <call-name> stop
STOP_PATTERN = re.compile(r"\bstop\b", re.IGNORECASE)
# <call-name> list trusted|ignored
LIST_PATTERN = re.compile(r"\blist\s+(trusted|ignored)\b", re.IGNORECASE)

# Words that mean an untrusted actor is trying to give an order
ACTION_VERBS = (
    "follow", "goto", "come", "tp", "tpa", "wait",
    "mine", "build", "attack", "hold", "drop",
)
ACTION_VERB_PATTERN = re.compile(
    r"\b(?:" + "|".join(ACTION_VERBS) + r")\b|\bgo\s+to\b",
    re.IGNORECASE,
)

# Instruction parsing
FOLLOW_PATTERN = re.compile(r"\b(follow|come)\b", re.IGNORECASE)
GOTO_PATTERN = re.compile(
    r"\b(?:go\s+to|goto|go|move\s+to|move|walk\s+to|walk|head\s+to|head|travel\s+to|travel)"
    r"\s*(?:to\s+)?(?:coords?\s+|coordinates\s+)?"
    r"(-?\d+)[\s,]+(-?\d+)[\s,]+(-?\d+)\b",
    re.IGNORECASE,
)
TELEPORT_PATTERN = re.compile(r"\b(tpa|tp|teleport)\b", re.IGNORECASE)
TELEPORT_EXCLUDE_PATTERN = re.compile(r"\brequest", re.IGNORECASE)
WAIT_PATTERN = re.compile(
    r"\bwait\s+(?:for\s+)?(-?\d+)\s*(?:s|secs?|seconds?)?\b",
    re.IGNORECASE,
)

# Tokens skipped when looking for the target after a verb
TARGET_STOP_WORDS = {"to", "at", "the"}
TARGET_SELF_WORDS = {"me", "here"}
NAME_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,16}$")
TOKEN_PATTERN = re.compile(r"[A-Za-z0-9_]+")

# Teleport request notifications from common teleport plugins
TPA_REQUEST_PATTERNS = (
    re.compile(r"^([A-Za-z0-9_]{1,16}) has requested (?:to teleport to you|that you teleport to them)", re.IGNORECASE),
    re.compile(r"^([A-Za-z0-9_]{1,16}) (?:wants|would like) to teleport to you", re.IGNORECASE),
    re.compile(r"teleport request from ([A-Za-z0-9_]{1,16})", re.IGNORECASE),
)

# Auth plugin prompts
REGISTER_PROMPT_PATTERN = re.compile(r"/register\b", re.IGNORECASE)
LOGIN_PROMPT_PATTERN = re.compile(r"/login\b", re.IGNORECASE)

# Protocol or version mismatch signatures in connection errors
VERSION_MISMATCH_PATTERNS = (
    "unsupported protocol version",
    "unsupported version",
    "outdated server",
    "outdated client",
    "version mismatch",
    "incompatible",
    "this server is version",
    "please use",
)
