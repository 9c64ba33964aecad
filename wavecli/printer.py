"""wave printer - render an HTTP response for the terminal."""

import json
from contextlib import nullcontext

import click
from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import JsonLexer
from pygments.token import Keyword, Name, Number, String, Token
from rich.console import Console

from wavecli.builder import ResolvedRequest
from wavecli.executor import HttpResponse

# (light background, dark background) pairs; "*x*" is bold
JSON_COLORS = {
    Token: ("", ""),
    Name.Tag: ("*yellow*", "*yellow*"),
    String: ("green", "green"),
    Number: ("cyan", "cyan"),
    Keyword.Constant: ("magenta", "magenta"),
}


def status_color(status_code: int) -> str:
    if 200 <= status_code < 300:
        return "green"
    if 300 <= status_code < 400:
        return "yellow"
    if 400 <= status_code < 600:
        return "red"
    return "white"


def _header_line(name: str, value: str) -> str:
    return f"{click.style(name, fg='blue')}: {value}"


def format_response(response: HttpResponse, verbose: bool = False) -> str:
    """Format a response as styled text.

    - status line, colored by class
    - all headers when verbose, or when the status is 4xx/5xx
    - otherwise the Content-Type header alone if the body is not JSON
    - JSON bodies pretty-printed and highlighted, anything else as text

    click.echo strips the styling when stdout is not a terminal.
    """
    lines: list[str] = [
        click.style(f"Status: {response.status_code}", fg=status_color(response.status_code), bold=True),
    ]

    parsed = None
    is_json = False
    if response.body:
        try:
            parsed = json.loads(response.body)
            is_json = True
        except ValueError:
            pass

    show_headers = verbose or 400 <= response.status_code < 600
    if show_headers:
        for name, value in response.headers:
            lines.append(_header_line(name, value))
    elif not is_json:
        content_type = response.content_type
        if content_type is not None:
            lines.append(_header_line("Content-Type", content_type))

    if is_json:
        lines.append(colorize_json(json.dumps(parsed, indent=2, ensure_ascii=False)))
    elif response.body:
        lines.append(response.text)

    return "\n".join(lines)


def colorize_json(text: str) -> str:
    """Highlight pretty-printed JSON, object keys in bold yellow."""
    return highlight(text, JsonLexer(), TerminalFormatter(colorscheme=JSON_COLORS)).rstrip("\n")


def sending_spinner(request: ResolvedRequest, console: Console | None = None):
    """Spinner on stderr while a request is in flight.

    Returns a no-op context when stderr is not a terminal.
    """
    console = console or Console(stderr=True)
    if not console.is_terminal:
        return nullcontext()
    return console.status(f"{request.method} {request.url}", spinner="dots")
