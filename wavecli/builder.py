"""wave builder - merge a collection template with CLI overrides into one request."""

import copy
import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any
from urllib.parse import quote, urlencode

from wavecli.collection import SUPPORTED_METHODS, RequestTemplate
from wavecli.core import resolve_in_obj, resolve_vars
from wavecli.errors import MissingMethodOrUrl, UnsupportedMethod

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

Pair = tuple[str, str]


@dataclass(frozen=True)
class ResolvedRequest:
    """A fully expanded request, ready for the transport.

    headers and body are ordered pairs. body values are strings, except JSON
    values declared in a collection, which keep their YAML types. Nested
    values are frozen: mappings are read-only proxies and lists are tuples.
    """

    method: str
    url: str
    headers: tuple[Pair, ...] = ()
    body: tuple[tuple[str, Any], ...] = ()
    encoding: str = "json"

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    @property
    def content_type(self) -> str | None:
        return self.header("Content-Type")

    @property
    def content(self) -> bytes | None:
        """Serialized body, or None when there are no body fields."""
        if not self.body:
            return None
        if self.encoding == "form":
            pairs = [(k, _form_value(v)) for k, v in self.body]
            return urlencode(pairs, quote_via=quote).encode("utf-8")
        return _to_json(dict(self.body)).encode("utf-8")


def _form_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return _to_json(value)


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), default=_thaw)


def _thaw(value: Any) -> Any:
    if isinstance(value, MappingProxyType):
        return dict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def freeze(value: Any) -> Any:
    """Recursively convert dicts to read-only mappings and lists to tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, list | tuple):
        return tuple(freeze(item) for item in value)
    return value


def normalize_method(method: str) -> str:
    upper = method.strip().upper()
    if upper not in SUPPORTED_METHODS:
        raise UnsupportedMethod(method)
    return upper


def ensure_url_scheme(url: str) -> str:
    if url.startswith(("http://", "https://")):
        return url
    return f"http://{url}"


def set_header(headers: list[Pair], name: str, value: str) -> None:
    """Replace a header in place (case-insensitive name match) or append it."""
    lowered = name.lower()
    for i, (key, _) in enumerate(headers):
        if key.lower() == lowered:
            headers[i] = (name, value)
            return
    headers.append((name, value))


def build_request(
    template: RequestTemplate | None = None,
    *,
    method: str | None = None,
    url: str | None = None,
    headers: Iterable[Pair] = (),
    fields: Iterable[Pair] = (),
    form: bool = False,
    variables: Mapping[str, str] | None = None,
    env: Mapping[str, str] | None = None,
) -> ResolvedRequest:
    """Build a ResolvedRequest.

    Merge order:
      1. template method/url/headers/body (if a template is given);
         explicit method/url replace the template's
      2. every string, template or CLI, goes through resolve_vars
      3. CLI headers replace same-named headers (case-insensitive) or append
      4. CLI body fields replace same-keyed fields (case-sensitive) or append
      5. form if `form` or the template declares form, else JSON; the matching
         Content-Type is added when there is a body and none is set

    CLI values are applied last, so they always win over the template.
    """
    variables = variables or {}
    env = env if env is not None else {}

    base_headers: tuple[Pair, ...] = ()
    base_body: dict[str, Any] = {}
    declared_encoding = None
    if template is not None:
        method = method or template.method
        url = url or template.url
        base_headers = template.headers
        base_body = copy.deepcopy(dict(template.body or {}))
        declared_encoding = template.body_encoding

    if not method or not url:
        raise MissingMethodOrUrl()

    method = normalize_method(method)
    url = ensure_url_scheme(resolve_vars(url, variables, env))

    merged_headers: list[Pair] = []
    for name, value in base_headers:
        set_header(merged_headers, name, resolve_vars(value, variables, env))

    body = {k: resolve_in_obj(v, variables, env) for k, v in base_body.items()}

    for name, value in headers:
        set_header(merged_headers, name, resolve_vars(value, variables, env))

    for key, value in fields:
        body[key] = resolve_vars(value, variables, env)

    encoding = "form" if form or declared_encoding == "form" else "json"

    if body and not any(k.lower() == "content-type" for k, _ in merged_headers):
        content_type = FORM_CONTENT_TYPE if encoding == "form" else JSON_CONTENT_TYPE
        merged_headers.append(("Content-Type", content_type))

    request = ResolvedRequest(
        method=method,
        url=url,
        headers=tuple(merged_headers),
        body=tuple((k, freeze(v)) for k, v in body.items()),
        encoding=encoding,
    )
    logger.debug(
        "built %s %s (%d headers, %d %s fields)",
        request.method,
        request.url,
        len(request.headers),
        len(request.body),
        request.encoding,
    )
    return request
