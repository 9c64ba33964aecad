"""wave collections - load named request templates from YAML files.

A collection is one YAML file in the collections directory:

    variables:
      base_url: https://api.example.com
    requests:
      - name: get-user-info
        method: GET
        url: ${base_url}/users/1
        headers:
          Accept: application/json
      - name: create-user
        method: POST
        url: ${base_url}/users
        body:
          json:
            name: alice

Its identity is the filename stem; a top-level `name` key is rejected.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from wavecli.core import COLLECTION_EXTENSIONS
from wavecli.errors import (
    CollectionNotFound,
    DuplicateRequestName,
    InvalidCollection,
    RequestNotFound,
)

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")
BODY_ENCODINGS = ("json", "form")


@dataclass(frozen=True)
class RequestTemplate:
    """One entry of a collection's `requests:` list, placeholders unexpanded."""

    name: str
    method: str
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    body: Mapping[str, Any] | None = None
    body_encoding: str | None = None


@dataclass(frozen=True)
class Collection:
    name: str
    path: Path | None
    variables: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    requests: tuple[RequestTemplate, ...] = ()

    def get_request(self, name: str) -> RequestTemplate:
        """Exact, case-sensitive lookup by request name."""
        for req in self.requests:
            if req.name == name:
                return req
        raise RequestNotFound(self.name, name)

    def request_names(self) -> list[str]:
        return [r.name for r in self.requests]


def collection_paths(identifier: str, directory: str | Path) -> list[Path]:
    """Candidate files for a collection, in lookup order."""
    directory = Path(directory)
    return [directory / f"{identifier}{ext}" for ext in COLLECTION_EXTENSIONS]


def find_collection_file(identifier: str, directory: str | Path) -> Path:
    candidates = collection_paths(identifier, directory)
    for p in candidates:
        if p.is_file():
            return p
    raise CollectionNotFound(identifier, directory, [str(p) for p in candidates])


def load_collection(identifier: str, directory: str | Path) -> Collection:
    """Locate, read and validate the collection `identifier` in directory."""
    path = find_collection_file(identifier, directory)
    logger.debug("loading collection %s from %s", identifier, path)
    with open(path, encoding="utf-8") as f:
        text = f.read()
    return parse_collection(text, identifier, path)


def parse_collection(text: str, name: str, path: Path | None = None) -> Collection:
    """Parse YAML text into a Collection. `name` is the collection identity."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidCollection(name, f"malformed YAML: {e}") from e

    if not isinstance(data, dict):
        raise InvalidCollection(name, "top level must be a mapping with a 'requests' list")

    if "name" in data:
        raise InvalidCollection(
            name,
            "top-level 'name' is not allowed; the collection name is the file name",
        )
    for key in data:
        if key not in ("variables", "requests"):
            logger.debug("collection %s: ignoring unknown top-level key %r", name, key)

    variables = _parse_variables(name, data.get("variables"))

    raw_requests = data.get("requests")
    if not isinstance(raw_requests, list):
        raise InvalidCollection(name, "'requests' must be a list")

    requests: list[RequestTemplate] = []
    seen: set[str] = set()
    for index, entry in enumerate(raw_requests):
        tmpl = _parse_request(name, index, entry)
        if tmpl.name in seen:
            raise DuplicateRequestName(name, tmpl.name)
        seen.add(tmpl.name)
        requests.append(tmpl)

    logger.debug("collection %s: %d requests, %d variables", name, len(requests), len(variables))
    return Collection(
        name=name,
        path=path,
        variables=MappingProxyType(variables),
        requests=tuple(requests),
    )


def list_collections(directory: str | Path) -> list[str]:
    """Sorted stems of the collection files in directory."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    names = {
        f.stem
        for f in directory.iterdir()
        if f.is_file() and f.suffix in COLLECTION_EXTENSIONS
    }
    return sorted(names)


# ── Validation helpers ───────────────────────────────────────────────────


def _scalar_to_str(value: Any) -> str | None:
    """String form of a YAML scalar, or None for null/collections."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str | int | float):
        return str(value)
    return None


def _parse_variables(collection: str, raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise InvalidCollection(collection, "'variables' must be a mapping")
    variables: dict[str, str] = {}
    for key, value in raw.items():
        text = _scalar_to_str(value)
        if text is None:
            raise InvalidCollection(collection, f"variable '{key}' must be a string")
        variables[str(key)] = text
    return variables


def _parse_request(collection: str, index: int, entry: Any) -> RequestTemplate:
    if not isinstance(entry, dict):
        raise InvalidCollection(collection, f"requests[{index}] must be a mapping")

    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise InvalidCollection(collection, f"requests[{index}] is missing 'name'")

    for required in ("method", "url"):
        if not isinstance(entry.get(required), str) or not entry[required]:
            raise InvalidCollection(collection, f"missing '{required}'", request=name)

    method = entry["method"].strip().upper()
    if method not in SUPPORTED_METHODS:
        raise InvalidCollection(
            collection,
            f"unsupported method '{entry['method']}'",
            request=name,
        )

    headers: list[tuple[str, str]] = []
    raw_headers = entry.get("headers")
    if raw_headers is not None:
        if not isinstance(raw_headers, dict):
            raise InvalidCollection(collection, "'headers' must be a mapping", request=name)
        for key, value in raw_headers.items():
            text = _scalar_to_str(value)
            if text is None:
                raise InvalidCollection(
                    collection,
                    f"header '{key}' must be a string",
                    request=name,
                )
            headers.append((str(key), text))

    body, encoding = _parse_body(collection, name, entry.get("body"))

    return RequestTemplate(
        name=name,
        method=method,
        url=entry["url"],
        headers=tuple(headers),
        body=body,
        body_encoding=encoding,
    )


def _parse_body(collection: str, request: str, raw: Any) -> tuple[dict | None, str | None]:
    """Validate `body: {json: ...}` / `body: {form: ...}`; exactly one key."""
    if raw is None:
        return None, None
    if not isinstance(raw, dict):
        raise InvalidCollection(collection, "'body' must be a mapping", request=request)

    unknown = [k for k in raw if k not in BODY_ENCODINGS]
    if unknown:
        raise InvalidCollection(
            collection,
            f"unknown body key '{unknown[0]}', expected 'json' or 'form'",
            request=request,
        )
    if len(raw) != 1:
        raise InvalidCollection(
            collection,
            "body must contain exactly one of 'json' or 'form'",
            request=request,
        )

    encoding, content = next(iter(raw.items()))
    if not isinstance(content, dict):
        raise InvalidCollection(
            collection,
            f"body '{encoding}' must be a mapping",
            request=request,
        )

    if encoding == "form":
        form: dict[str, str] = {}
        for key, value in content.items():
            text = _scalar_to_str(value)
            if text is None:
                raise InvalidCollection(
                    collection,
                    f"form field '{key}' must be a string",
                    request=request,
                )
            form[str(key)] = text
        return form, encoding

    return {str(k): v for k, v in content.items()}, encoding
