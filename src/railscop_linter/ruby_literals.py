"""Render Ruby literals the way Ruby's `Symbol#inspect` and `String#dump` do."""

import re

PLAIN_SYMBOL_RE = re.compile(
    r"""^(?:
        [^\W\d]\w*[?!=]?
      | @@?[^\W\d]\w*
      | \$[^\W\d]\w*
      | \[\]=? | \*\* | === | == | =~ | != | !~ | <=> | <= | >= | << | >> | \+@ | -@
      | [+\-*/%<>!~^&|]
    )$""",
    re.VERBOSE,
)

LABEL_RE = re.compile(r"^[^\W\d]\w*[?!]?$")

DUMP_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\f": "\\f",
    "\v": "\\v",
    "\b": "\\b",
    "\a": "\\a",
    "\x1b": "\\e",
}


def dump_string(value: str) -> str:
    """Double-quoted, escaped, ASCII-only rendering of a string."""
    out = []
    for index, char in enumerate(value):
        if char in DUMP_ESCAPES:
            out.append(DUMP_ESCAPES[char])
        elif char == "#" and value[index + 1 : index + 2] in ("{", "$", "@"):
            out.append("\\#")
        elif " " <= char <= "~":
            out.append(char)
        elif ord(char) < 0x80:
            out.append(f"\\x{ord(char):02X}")
        elif ord(char) <= 0xFFFF:
            out.append(f"\\u{ord(char):04X}")
        else:
            out.append(f"\\u{{{ord(char):X}}}")
    return '"' + "".join(out) + '"'


def inspect_symbol(value: str) -> str:
    if PLAIN_SYMBOL_RE.match(value):
        return f":{value}"
    return f":{dump_string(value)}"


def is_label(value: str) -> bool:
    """True when `value:` can be written as a bare hash key."""
    return bool(LABEL_RE.match(value))
