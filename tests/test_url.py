"""
URL normalisation tests — every audit starts here, so the edge cases matter.
"""
import pytest

from webinspect.exceptions import InvalidURLError
from webinspect.utils.url import normalize_url, origin_of


class TestNormalizeUrl:
    def test_bare_domain_gets_https_and_root_path(self):
        assert normalize_url("example.com") == "https://example.com/"

    def test_http_scheme_is_kept(self):
        assert normalize_url("http://example.com") == "http://example.com/"

    def test_host_is_lowercased(self):
        assert normalize_url("HTTPS://Example.COM/Path") == "https://example.com/Path"

    def test_path_and_query_preserved(self):
        assert normalize_url("https://example.com/a/b?x=1") == "https://example.com/a/b?x=1"

    def test_default_port_dropped(self):
        assert normalize_url("https://example.com:443/") == "https://example.com/"

    def test_custom_port_kept(self):
        assert normalize_url("http://example.com:8080") == "http://example.com:8080/"

    def test_surrounding_whitespace_ignored(self):
        assert normalize_url("  example.com  ") == "https://example.com/"

    def test_ip_literal_accepted(self):
        assert normalize_url("http://93.184.216.34") == "http://93.184.216.34/"

    def test_internationalised_domain_converted_to_punycode(self):
        assert normalize_url("bücher.de") == "https://xn--bcher-kva.de/"
        assert normalize_url("https://BÜCHER.de/katalog") == "https://xn--bcher-kva.de/katalog"

    @pytest.mark.parametrize("raw", ["not a url", "ftp://example.com", "https://exa mple.com", "http://example.com:99999"])
    def test_invalid_format(self, raw):
        with pytest.raises(InvalidURLError) as exc:
            normalize_url(raw)
        assert exc.value.message == "Invalid URL format"

    @pytest.mark.parametrize("raw", [None, "", 42, ["example.com"]])
    def test_missing_or_non_string(self, raw):
        with pytest.raises(InvalidURLError) as exc:
            normalize_url(raw)
        assert exc.value.message == "Valid URL is required"


class TestOrigin:
    def test_origin_strips_path(self):
        assert origin_of("https://example.com/a/b?c=1") == "https://example.com"

    def test_origin_keeps_port(self):
        assert origin_of("http://example.com:8080/x") == "http://example.com:8080"
