"""parsers/html_parser.py - Keep only the <body> content of HTML/XHTML manuscripts."""

from bs4 import BeautifulSoup


def extract_body(data: bytes) -> bytes:
    soup = BeautifulSoup(data, features="lxml")
    body = soup.body
    if body is None:
        return soup.decode_contents().encode("utf-8")
    return body.decode_contents().encode("utf-8")
