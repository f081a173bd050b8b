CHANGE_TYPES = ("breaking", "feat", "bugfix", "improvement", "internal")
CHANGE_TITLES = {
    "breaking": "Breaking changes",
    "feat": "Features",
    "improvement": "Improvements",
    "bugfix": "Bug fixes",
    "internal": "Internal changes",
}
DEFAULT_TYPE = "improvement"

# First match wins; keep the order.
TYPE_RULES = (
    ("break", "breaking"),
    ("feat", "feat"),
    ("bug", "bugfix"),
    ("fix", "bugfix"),
    ("internal", "internal"),
)
MODULE_RULES = (
    ("friend", "Friend"),
    ("firend", "Friend"),
    ("anti", "AntiAddiction"),
    ("防沉迷", "AntiAddiction"),
)

# Organization and product-suite markers that decorate module headings.
DECORATIVE_MARKERS = ("SDK", "Tap")


def match_type(text: str) -> str:
    # Keyword lookup over the lower-cased heading; unmatched text is an improvement.
    lowered = text.lower()
    for keyword, change_type in TYPE_RULES:
        if keyword in lowered:
            return change_type
    return DEFAULT_TYPE


def strip_decorations(text: str) -> str:
    for marker in DECORATIVE_MARKERS:
        text = text.replace(marker, "")
    return text.strip()


def match_module(text: str) -> str:
    # Known aliases map to a canonical module; anything else is the bare heading text.
    stripped = strip_decorations(text)
    lowered = stripped.lower()
    for keyword, module in MODULE_RULES:
        if keyword in lowered:
            return module
    return stripped
