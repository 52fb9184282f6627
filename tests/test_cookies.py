"""Unit tests for the cookie helpers."""

import httpx

from motorproxy.cookies import extract_credential, find_cookie, serialize_cookies


class TestSerializeCookies:
    def test_keeps_only_name_value_pairs(self):
        headers = httpx.Headers(
            [("set-cookie", "a=1; Path=/"), ("set-cookie", "b=2; HttpOnly")]
        )
        assert serialize_cookies(headers) == "a=1; b=2"

    def test_no_set_cookie_header(self):
        headers = httpx.Headers({"content-type": "text/html"})
        assert serialize_cookies(headers) == ""

    def test_accepts_raw_values(self):
        assert serialize_cookies(["x=9; Domain=.ebsco.com; Secure"]) == "x=9"

    def test_accepts_mapping_with_list(self):
        headers = {"set-cookie": ["a=1; Path=/", "b=2"]}
        assert serialize_cookies(headers) == "a=1; b=2"

    def test_none(self):
        assert serialize_cookies(None) == ""


class TestFindCookie:
    def test_finds_value(self):
        assert find_cookie("a=1; b=2", "b") == "2"

    def test_missing_name(self):
        assert find_cookie("a=1", "z") is None

    def test_empty_string(self):
        assert find_cookie("", "a") is None

    def test_value_with_equals_is_cut(self):
        assert find_cookie("tok=abc==; x=1", "tok") == "abc"

    def test_entry_without_value(self):
        assert find_cookie("flag; a=1", "flag") is None


class TestExtractCredential:
    def test_ebsco_auth_wins(self):
        assert extract_credential("authToken=T; ebsco-auth=E") == "E"

    def test_auth_token_second(self):
        assert extract_credential("sess=1; authToken=T") == "T"

    def test_whole_string_fallback(self):
        assert extract_credential("sess=1; other=2") == "sess=1; other=2"

    def test_empty(self):
        assert extract_credential("") is None
