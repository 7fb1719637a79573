import re

MINUS = "−"

# "m s-1" / "m s−1" -> "m s<sup>−1</sup>"
_UNIT_EXPONENT = re.compile(r"([a-zA-Z])\s*(−|-)\s*([0-9]+)")
# "10^3" / "m^-2" -> "10<sup>3</sup>" / "m<sup>−2</sup>"
_CARET_EXPONENT = re.compile(r"(\w+)\^([−-]?\d+)", re.ASCII)

def _caret(match: re.Match) -> str:
    power = match.group(2).replace("-", MINUS, 1)
    return f"{match.group(1)}<sup>{power}</sup>"

def format_exponents_html(text: str | None) -> str:
    """Turn simple exponent notation into <sup> markup. Input is not escaped."""
    if not text:
        return ""
    t = str(text)
    t = _UNIT_EXPONENT.sub(lambda m: f"{m.group(1)}<sup>{MINUS}{m.group(3)}</sup>", t)
    return _CARET_EXPONENT.sub(_caret, t)
