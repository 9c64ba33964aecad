"""wave tokens - split free-form CLI arguments into headers and body fields."""

from collections.abc import Iterable

from wavecli.errors import MalformedToken

Pair = tuple[str, str]


def classify_token(token: str) -> tuple[str, Pair]:
    """Classify one token as ("header", pair) or ("field", pair).

    Whichever of ':' and '=' comes first decides; the token is split once
    at that separator and the value is kept whole, so `url=http://x` is a
    body field and `X-Expr:a=b` is a header.
    """
    colon = token.find(":")
    equals = token.find("=")

    if colon == -1 and equals == -1:
        raise MalformedToken(token)

    if equals == -1 or (colon != -1 and colon < equals):
        key, value = token[:colon].strip(), token[colon + 1 :].strip()
        if not key:
            raise MalformedToken(token, "header name is empty")
        if any(c.isspace() for c in key):
            raise MalformedToken(token, "header name contains whitespace")
        return "header", (key, value)

    key, value = token[:equals].strip(), token[equals + 1 :].strip()
    if not key:
        raise MalformedToken(token, "body field name is empty")
    return "field", (key, value)


def classify_tokens(tokens: Iterable[str]) -> tuple[list[Pair], list[Pair]]:
    """Return (headers, body_fields), both in input order, duplicates kept."""
    headers: list[Pair] = []
    fields: list[Pair] = []
    for token in tokens:
        kind, pair = classify_token(token)
        if kind == "header":
            headers.append(pair)
        else:
            fields.append(pair)
    return headers, fields
