import re

_INVALID_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')
_DOT_RUNS = re.compile(r"\.{2,}")
_UNDERSCORE_RUNS = re.compile(r"_{2,}")
_RESERVED = {"CON", "PRN", "AUX", "NUL"} | {f"COM{i}" for i in range(1, 10)} | {f"LPT{i}" for i in range(1, 10)}


def sanitize_filename(filename: str, fallback: str = "deck") -> str:
    """
    Turn a deck name into a file name that is safe on every platform.

    Invalid characters and runs of dots become underscores, leading and
    trailing dots, underscores and whitespace are dropped, and reserved
    Windows device names get an underscore prefix.
    """
    safe_name = _INVALID_CHARS.sub("_", filename)
    safe_name = _DOT_RUNS.sub("_", safe_name)
    safe_name = _UNDERSCORE_RUNS.sub("_", safe_name)
    safe_name = safe_name.strip().strip("._ ")
    if not safe_name:
        return fallback
    if safe_name.split(".")[0].upper() in _RESERVED:
        safe_name = f"_{safe_name}"
    return safe_name
