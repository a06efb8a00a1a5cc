from __future__ import annotations

from loguru import logger

QUOTE = "'"
SEPARATOR = ","
ESCAPE = "\\"
EMPTY_FORMS = frozenset({"[]", "['']", '[""]'})

# Malformed encodings degrade to "no contexts" instead of failing the request.
DECODE_FAILURE_RESULT: list[str] = []


def decode_string_list(raw: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """Decode a Python-repr style list string such as "['a', 'b']".

    Already structured input is passed through. Never raises: anything that
    cannot be scanned returns an empty list and logs a warning.
    """
    if isinstance(raw, list):
        return raw
    if isinstance(raw, tuple):
        return list(raw)
    try:
        if raw is None:
            return []
        text = raw.strip()
        if not text or text in EMPTY_FORMS:
            return []
        return _scan_items(text[1:-1].rstrip())
    except Exception as exc:
        logger.warning(
            "list_decoder.degraded error={} raw_type={} raw_prefix={!r}",
            exc.__class__.__name__,
            type(raw).__name__,
            str(raw)[:80],
        )
        return list(DECODE_FAILURE_RESULT)


def _scan_items(body: str) -> list[str]:
    items: list[str] = []
    buf: list[str] = []
    in_quote = False
    escape_next = False
    i = 0
    n = len(body)
    while i < n:
        char = body[i]
        if escape_next:
            buf.append(char)
            escape_next = False
            i += 1
            continue
        if char == ESCAPE:
            buf.append(char)
            escape_next = True
            i += 1
            continue
        if char == QUOTE:
            if in_quote and i + 1 < n and body[i + 1] == SEPARATOR:
                items.append("".join(buf).strip())
                buf = []
                in_quote = False
                i += 2
                # ", '" between items; tolerate a doubled space
                for _ in range(2):
                    if i < n and body[i] == " ":
                        i += 1
                if i < n and body[i] == QUOTE:
                    in_quote = True
                    i += 1
                continue
            if in_quote and i + 1 == n:
                # closing quote of the last item is not emitted
                in_quote = False
                i += 1
                continue
            if not in_quote:
                in_quote = True
                i += 1
                continue
        if in_quote or char not in (QUOTE, SEPARATOR):
            buf.append(char)
        i += 1

    tail = "".join(buf)
    if tail.strip():
        items.append(tail.strip())
    return items
