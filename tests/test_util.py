import pytest

from webneg.util import bytes_, html_escape, parse_qsl_text, text_, unquote


class Test_parse_qsl_text:
    def _callFUT(self, qs, encoding="utf-8"):
        return list(parse_qsl_text(qs, encoding))

    def test_empty(self):
        assert self._callFUT("") == []

    def test_pairs(self):
        assert self._callFUT("a=1&b=2;c=3") == [("a", "1"), ("b", "2"), ("c", "3")]

    def test_plus_is_space(self):
        assert self._callFUT("q=a+b") == [("q", "a b")]

    def test_no_value(self):
        assert self._callFUT("flag&a=") == [("flag", ""), ("a", "")]

    def test_repeated(self):
        assert self._callFUT("a=1&a=2") == [("a", "1"), ("a", "2")]

    def test_percent_decoding(self):
        assert self._callFUT("_format=%6Aso%6E") == [("_format", "json")]

    def test_utf8(self):
        assert self._callFUT("n=%C3%A9") == [("n", "\xe9")]

    def test_latin1(self):
        assert self._callFUT("n=%E9", "latin-1") == [("n", "\xe9")]

    def test_invalid_utf8_replaced(self):
        assert self._callFUT("n=%FF") == [("n", "\ufffd")]

    def test_stray_percent_kept(self):
        assert self._callFUT("a=%20b%-1") == [("a", " b%-1")]


class Test_unquote:
    @pytest.mark.parametrize("value, expected", [
        (b"", b""),
        (b"abc", b"abc"),
        (b"a%20b", b"a b"),
        (b"100%", b"100%"),
        (b"%zz", b"%zz"),
        (b"%+1", b"%+1"),
        (b"%-1x", b"%-1x"),
        (b"% a", b"% a"),
        (b"%a", b"%a"),
        (b"%4a%4", b"J%4"),
    ])
    def test_unquote(self, value, expected):
        assert unquote(value) == expected


def test_html_escape():
    assert html_escape(None) == ""
    assert html_escape(42) == "42"
    assert html_escape('<a href="x">') == "&lt;a href=&quot;x&quot;&gt;"
    assert html_escape("\xe9") == "&#233;"


def test_html_escape_html_object():
    class Markup(object):
        def __html__(self):
            return "<b>safe</b>"

    assert html_escape(Markup()) == "<b>safe</b>"


def test_text_():
    assert text_(b"abc") == "abc"
    assert text_("abc") == "abc"
    assert text_(b"\xc3\xa9", "utf-8") == "\xe9"


def test_bytes_():
    assert bytes_("abc") == b"abc"
    assert bytes_(b"abc") == b"abc"
    assert bytes_("\xe9", "utf-8") == b"\xc3\xa9"
