# util/functions.py
import math
import re
from typing import Optional
from util.constants import FALLBACK_EXTENSION


def file_extension(filename: Optional[str], fallback: str = FALLBACK_EXTENSION) -> str:
    """
    - Return the suffix after the last dot of `filename`.
    - Falls back when there is no dot, the suffix is empty, or it is not alphanumeric
      (keeps the derived storage key URL-safe).
    """
    if not filename or "." not in filename:
        return fallback
    ext = filename.rsplit(".", 1)[1]
    return ext if ext and ext.isalnum() else fallback


def cache_control(max_age: int, stale_while_revalidate: Optional[int], private: bool) -> str:
    if private:
        return f"private, max-age={max_age}"
    if stale_while_revalidate is None:
        return f"public, max-age={max_age}"
    return f"public, max-age={max_age}, stale-while-revalidate={stale_while_revalidate}"


def percent_of(current_time: float, duration: Optional[float]) -> Optional[int]:
    """
    Whole percent watched, or None when the duration is not known yet.
    """
    if duration is None or not math.isfinite(duration) or duration <= 0:
        return None
    if current_time is None or not math.isfinite(current_time):
        return None
    pct = math.floor(current_time / duration * 100)
    return max(0, min(100, pct))


_GLOB_SPECIALS = re.compile(r"([*?\[\]\\])")


def escape_glob(text: str) -> str:
    """Backslash-escape `text` so it matches itself literally inside a Redis glob."""
    return _GLOB_SPECIALS.sub(r"\\\1", text)


def compile_glob(pattern: str) -> "re.Pattern[str]":
    """
    Redis MATCH dialect: `*`, `?`, `[abc]`, `[^a]`, `[a-z]` and backslash escapes.
    An unterminated `[` is taken literally. Use `.fullmatch()` on the result.
    """
    out = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "\\" and i + 1 < n:
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if c == "*":
            out.append(".*")
        elif c == "?":
            out.append(".")
        elif c == "[":
            j = i + 1
            negate = j < n and pattern[j] == "^"
            if negate:
                j += 1
            body = []
            while j < n and pattern[j] != "]":
                if pattern[j] == "\\" and j + 1 < n:
                    body.append(re.escape(pattern[j + 1]))
                    j += 2
                elif pattern[j] == "-" and body and j + 1 < n and pattern[j + 1] != "]":
                    body.append("-")
                    j += 1
                else:
                    body.append(re.escape(pattern[j]))
                    j += 1
            if j >= n:
                out.append(re.escape(c))
                i += 1
                continue
            if body:
                out.append(("[^" if negate else "[") + "".join(body) + "]")
            else:
                out.append("(?!)")
            i = j + 1
            continue
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out), re.S)
