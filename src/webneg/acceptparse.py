"""
Parses the media ranges found in an ``Accept`` header.

An ``Accept`` header generally takes the form of::

    text/html, application/json;q=0.9, */*;q=0.1

Parsing here is deliberately lenient: an entry that is not a valid media
range yields ``None`` instead of raising, and a ``q`` parameter that is not
a number falls back to ``1.0``.  Browsers are known to send such headers.
"""

import re

# RFC 7230 Section 3.2.3 "Whitespace"
# OWS            = *( SP / HTAB )
#                ; optional whitespace
OWS_re = '[ \t]*'

# RFC 7230 Section 3.2.6 "Field Value Components":
# tchar          = "!" / "#" / "$" / "%" / "&" / "'" / "*"
#                / "+" / "-" / "." / "^" / "_" / "`" / "|" / "~"
#                / DIGIT / ALPHA
tchar_re = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]"

# token          = 1*tchar
token_re = tchar_re + '+'
token_compiled_re = re.compile('^' + token_re + '$')

# RFC 7231 Section 3.1.1.1 "Media Type":
# media-type = type "/" subtype *( OWS ";" OWS parameter )
# type       = token
# subtype    = token
media_type_compiled_re = re.compile(
    '^' + OWS_re + '(' + token_re + ')/(' + token_re + ')' + OWS_re +
    '((?:;.*)?)$',
    re.DOTALL,
)

# Leading decimal of a q value; anything after it is ignored
float_prefix_compiled_re = re.compile(
    r'^[+-]?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?'
)


def _unquote(value):
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        # RFC 7230, section 3.2.6: a quoted-pair stands for the octet
        # following the backslash
        return re.sub(r'\\(.)', r'\1', value[1:-1])
    return value


def parse_params(segment):
    """
    Parse a ``;name=value;...`` parameter segment into a dict.

    Names are lowercased, quoted values are unquoted.  Pieces without an
    ``=`` or with an empty name are ignored; a repeated name keeps its last
    value.
    """
    params = {}
    for piece in segment.split(';'):
        name, sep, value = piece.partition('=')
        name = name.strip()
        if not sep or not token_compiled_re.match(name):
            continue
        params[name.lower()] = _unquote(value.strip())
    return params


def parse_media_type(value):
    """
    Parse a single media range such as ``text/html;level=1;q=0.5``.

    :param value: (``str``) one comma separated entry of an ``Accept``
                  header, surrounding whitespace allowed
    :return: a ``(type, subtype, params)`` tuple with `type` and `subtype`
             lowercased and `params` a dict, or ``None`` if `value` is not a
             media range.  ``*`` is only accepted as a type when the subtype
             is ``*`` as well.
    """
    match = media_type_compiled_re.match(value)
    if match is None:
        return None
    type_, subtype, segment = match.groups()
    type_ = type_.lower()
    subtype = subtype.lower()
    if type_ == '*' and subtype != '*':
        return None
    return type_, subtype, parse_params(segment)


def parse_q(params):
    """
    Return the quality value held in the ``q`` entry of `params`.

    Only the leading number of the value is read, so ``"0.5abc"`` gives
    ``0.5``.  The value is not clamped.  A missing or non numeric ``q``
    gives ``1.0``.
    """
    value = params.get('q')
    if value is None:
        return 1.0
    match = float_prefix_compiled_re.match(value.strip())
    if match is None:
        return 1.0
    return float(match.group(0))
