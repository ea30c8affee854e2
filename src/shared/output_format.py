"""
Output console formatting.

Turns the text shown in the demo output console into markup: status emoji and
well-known Authlete response fields are colored, newlines become <br> and very
long URLs or tokens are allowed to wrap. Text without any of these markers or
of the characters <, > and & is returned unchanged.
"""

import html
import re
from typing import List, Tuple, Union

_Rule = Tuple[re.Pattern, str]


def _span(color: str, text: str, extra: str = "") -> str:
    return f'<span style="color: {color}; font-weight: bold;{extra}">{text}</span>'


_LINE_RULES: List[_Rule] = [
    (re.compile(r"(Status: ✅ .*)"), _span("#059669", r"\g<1>")),
    (re.compile(r"(Status: ❌ .*)"), _span("#dc2626", r"\g<1>")),
    (re.compile(r"(✅ .*Response:)"), _span("#059669", r"\g<1>", " font-size: 14px;")),
    (re.compile(r"(❌ .*Error:)"), _span("#dc2626", r"\g<1>", " font-size: 14px;")),
]

_EMOJI_COLORS = [
    ("✅", "#059669"),
    ("❌", "#dc2626"),
    ("🔵", "#3b82f6"),
    ("🔧", "#f59e0b"),
    ("🚀", "#8b5cf6"),
    ("📖", "#10b981"),
    ("🎯", "#ef4444"),
    ("🎉", "#f97316"),
]

_EMOJI_RULES: List[_Rule] = [
    (re.compile(re.escape(emoji)), _span(color, emoji)) for emoji, color in _EMOJI_COLORS
]

_FIELD_RULES: List[_Rule] = [
    (re.compile(r'(ticket": ")([^"]+)(")'), r"\g<1>" + _span("#8b5cf6", r"\g<2>") + r"\g<3>"),
    (re.compile(r'(authorizationCode": ")([^"]+)(")'), r"\g<1>" + _span("#3b82f6", r"\g<2>") + r"\g<3>"),
    (re.compile(r'(access_token": ")([^"]+)(")'), r"\g<1>" + _span("#10b981", r"\g<2>") + r"\g<3>"),
    (re.compile(r'(refresh_token": ")([^"]+)(")'), r"\g<1>" + _span("#f59e0b", r"\g<2>") + r"\g<3>"),
    (re.compile(r'"action": "(INTERACTION|LOCATION|OK|BAD_REQUEST)"'), '"action": "' + _span("#8b5cf6", r"\g<1>") + '"'),
    (re.compile(r'"resultCode": "([^"]+)"'), '"resultCode": "' + _span("#6b7280", r"\g<1>") + '"'),
    (re.compile(r'(expires_in": )(\d+)'), r"\g<1>" + _span("#f59e0b", r"\g<2>")),
    (re.compile(r'(expiresAt": ")([^"]+)(")'), r"\g<1>" + _span("#f59e0b", r"\g<2>") + r"\g<3>"),
    (re.compile(r'"scope": "([^"]+)"'), '"scope": "' + _span("#10b981", r"\g<1>") + '"'),
    (re.compile(r'"scopes": \[([^\]]+)\]'), '"scopes": [' + _span("#10b981", r"\g<1>") + ']'),
    (re.compile(r'"clientId": (\d+)'), '"clientId": ' + _span("#3b82f6", r"\g<1>")),
    (re.compile(r'"clientName": "([^"]+)"'), '"clientName": "' + _span("#3b82f6", r"\g<1>") + '"'),
    (re.compile(r'"subject": "([^"]+)"'), '"subject": "' + _span("#8b5cf6", r"\g<1>") + '"'),
    (re.compile(r'"active": (true|false)'), '"active": ' + _span("#059669", r"\g<1>")),
    (re.compile(r'"usable": (true|false)'), '"usable": ' + _span("#059669", r"\g<1>")),
    (re.compile(r'(responseContent": ")([^"]+)(")'), r"\g<1>" + _span("#3b82f6", r"\g<2>") + r"\g<3>"),
]

_LAYOUT_RULES: List[_Rule] = [
    (re.compile(r"\n"), "<br>"),
    (re.compile(r"\s{2,}"), "&nbsp;&nbsp;"),
    (re.compile(r'([^>])(https?://[^\s<>"]+)'), r'\g<1><span style="word-break: break-all;">\g<2></span>'),
    (re.compile(r"([^>])([a-zA-Z0-9._-]{50,})"), r'\g<1><span style="word-break: break-all;">\g<2></span>'),
]

# Applied in this order
RULES: List[_Rule] = _LINE_RULES + _EMOJI_RULES + _FIELD_RULES + _LAYOUT_RULES


def format_output(message: Union[str, List[str]]) -> str:
    """
    Convert console text into display markup.

    Args:
        message: Text, or a list of lines joined with newlines

    Returns:
        str: HTML fragment for the output console
    """
    if isinstance(message, list):
        message = "\n".join(message)

    formatted = html.escape(message, quote=False)
    for pattern, replacement in RULES:
        formatted = pattern.sub(replacement, formatted)
    return formatted
