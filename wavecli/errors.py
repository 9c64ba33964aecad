"""wave errors - every failure that aborts an invocation."""


class WaveError(Exception):
    """Base error. Carries an optional hint printed after the message."""

    suggestion: str | None = None

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        if suggestion is not None:
            self.suggestion = suggestion
        super().__init__(message)


# ── CLI tokens ───────────────────────────────────────────────────────────


class MalformedToken(WaveError):
    suggestion = "Headers are key:value (Authorization:Bearer123), body fields are key=value (name=john)"

    def __init__(self, token: str, reason: str | None = None):
        self.token = token
        detail = reason or "must be in 'key:value' (header) or 'key=value' (body) format"
        super().__init__(f"Invalid argument '{token}': {detail}")


class MissingMethodOrUrl(WaveError):
    suggestion = "Example: wave get https://api.example.com/users"

    def __init__(self):
        super().__init__("Missing method or URL: give both, or run a collection request with -c")


class UnsupportedMethod(WaveError):
    def __init__(self, method: str):
        self.method = method
        super().__init__(
            f"Unsupported HTTP method: '{method}'. "
            "Supported methods: GET, POST, PUT, PATCH, DELETE, HEAD, OPTIONS",
        )


# ── Placeholders ─────────────────────────────────────────────────────────


class PlaceholderError(WaveError):
    """A ${...} placeholder could not be expanded."""


class UnresolvedVariable(PlaceholderError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Unresolved variable '{name}'",
            suggestion=f"Declare '{name}' under 'variables:' in the collection file",
        )


class UnresolvedEnvVar(PlaceholderError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Unresolved environment variable '{name}'",
            suggestion=f"export {name}=... or add it to the file given with --env-file",
        )


class MalformedPlaceholder(PlaceholderError):
    def __init__(self, text: str, reason: str):
        self.text = text
        super().__init__(f"Malformed placeholder in '{text}': {reason}")


# ── Collections ──────────────────────────────────────────────────────────


class CollectionError(WaveError):
    """Collection loading or lookup failed."""


class CollectionNotFound(CollectionError):
    def __init__(self, identifier: str, directory, tried: list[str]):
        self.identifier = identifier
        self.directory = str(directory)
        self.tried = tried
        super().__init__(
            f"Collection '{identifier}' not found in '{directory}'. "
            "Searched:\n" + "\n".join(f"  - {p}" for p in tried),
            suggestion="Run 'wave --init' to create a collections directory, or point --dir at one",
        )


class InvalidCollection(CollectionError):
    def __init__(self, collection: str, reason: str, request: str | None = None):
        self.collection = collection
        self.request = request
        where = f" (request '{request}')" if request else ""
        super().__init__(f"Invalid collection '{collection}'{where}: {reason}")


class DuplicateRequestName(CollectionError):
    def __init__(self, collection: str, name: str):
        self.collection = collection
        self.name = name
        super().__init__(
            f"Duplicate request name '{name}' in collection '{collection}'",
            suggestion="Request names must be unique within one collection file",
        )


class RequestNotFound(CollectionError):
    def __init__(self, collection: str, name: str):
        self.collection = collection
        self.name = name
        super().__init__(
            f"Request '{name}' not found in collection '{collection}'",
            suggestion=f"Run 'wave -c {collection} --list' to see available requests",
        )


# ── Transport ────────────────────────────────────────────────────────────


class TransportFailure(WaveError):
    """Network-level failure reported by the HTTP backend, text passed through."""
