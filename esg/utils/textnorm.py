import re

_NBSP = "\u00a0"
_THIN = "\u2009"
_NNBSP = "\u202f"
_IDEOGRAPHIC_SPACE = "\u3000"

_RE_SOFT_HYPHEN = re.compile("\u00ad")

# end-of-line hyphenation join: "green-\nhouse" -> "greenhouse"
_RE_EOL_HYPH = re.compile(r"(?<=[A-Za-z])[ \t]*-[ \t]*\r?\n\s*(?=[a-z])")

# CJK text wraps without spaces; a newline between two ideographs is a wrap
_RE_EOL_CJK = re.compile(r"(?<=[\u4e00-\u9fff])\r?\n(?=[\u4e00-\u9fff])")
_RE_SPECIAL_SPACES = re.compile(
    "[{}]".format(re.escape(_NBSP + _THIN + _NNBSP + _IDEOGRAPHIC_SPACE))
)
_RE_MANY_SPACES = re.compile(r"[ \t]{2,}")
_RE_ANY_WS = re.compile(r"\s+")


def normalize_hyphenation(text: str) -> str:
    if not text:
        return text
    s = text

    # 1) Normalize exotic spaces and remove soft hyphens
    s = _RE_SOFT_HYPHEN.sub("", s)
    s = _RE_SPECIAL_SPACES.sub(" ", s)

    # 2) Join words broken by hyphen at end of line
    s = _RE_EOL_HYPH.sub("", s)

    # 3) Join CJK runs wrapped across lines
    s = _RE_EOL_CJK.sub("", s)

    # 4) Collapse long runs of spaces (but keep single newlines)
    s = _RE_MANY_SPACES.sub(" ", s)

    return s


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run (newlines included) to one space and trim."""
    if not text:
        return ""
    return _RE_ANY_WS.sub(" ", text).strip()
