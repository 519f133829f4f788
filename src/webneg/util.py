import re
from html import escape

_hex_pair_re = re.compile(b"[0-9A-Fa-f]{2}")


def unquote(string):
    if not string:
        return b""
    res = string.split(b"%")

    if len(res) != 1:
        string = res[0]

        for item in res[1:]:
            if _hex_pair_re.match(item):
                string += bytes([int(item[:2], 16)]) + item[2:]
            else:
                # stray percent sign, keep it as sent
                string += b"%" + item

    return string


def parse_qsl_text(qs, encoding="utf-8"):
    """Decode a query string into ``(name, value)`` text pairs.

    Both ``&`` and ``;`` separate pairs and ``+`` stands for a space.
    A name without ``=`` gets an empty value.
    """
    qs = qs.encode("latin-1")
    qs = qs.replace(b"+", b" ")
    pairs = [s2 for s1 in qs.split(b"&") for s2 in s1.split(b";") if s2]

    for name_value in pairs:
        nv = name_value.split(b"=", 1)

        if len(nv) != 2:
            nv.append(b"")
        name = unquote(nv[0])
        value = unquote(nv[1])
        yield (name.decode(encoding, "replace"), value.decode(encoding, "replace"))


def text_(s, encoding="latin-1", errors="strict"):
    if isinstance(s, bytes):
        return str(s, encoding, errors)

    return s


def bytes_(s, encoding="latin-1", errors="strict"):
    if isinstance(s, str):
        return s.encode(encoding, errors)

    return s


def html_escape(s):
    """HTML-escape a string or object

    Non-string objects are converted with ``str()`` first and non-ASCII
    characters become ``&#num;`` entities.  None is treated specially,
    and returns the empty string.
    """

    if s is None:
        return ""
    __html__ = getattr(s, "__html__", None)

    if __html__ is not None and callable(__html__):
        return s.__html__()

    if not isinstance(s, str):
        s = str(s)
    s = escape(s, True)
    s = s.encode("ascii", "xmlcharrefreplace")

    return text_(s)

