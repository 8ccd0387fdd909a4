import pytest

from order_splitter.utils.validators import name_key, validate_url


@pytest.mark.parametrize(
    "url",
    ["ipn.eg/S/user/instapay/abc", "instapay.com", "http://pay.example.org:8080/x", "HTTPS://IPN.EG/abc"],
)
def test_accepts_links_with_or_without_scheme(url):
    assert validate_url(url)


@pytest.mark.parametrize("url", ["", "not a url", "localhost", "ftp://files.example.com", "https://"])
def test_rejects_malformed_links(url):
    assert not validate_url(url)


def test_name_key_ignores_case_and_padding():
    assert name_key("  Alice ") == name_key("ALICE")


def test_name_key_lowercases_without_folding():
    assert name_key("Straße") != name_key("STRASSE")
