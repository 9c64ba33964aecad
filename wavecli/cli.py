"""wave CLI - terminal HTTP client with YAML request collections."""

import logging
import sys
from pathlib import Path

import click

from wavecli import __version__

TOOL_HELP = """\
wave - terminal HTTP client.

Sends one HTTP request built from command-line tokens or from a named
request in a YAML collection, then prints the response.

\b
DIRECT MODE
───────────
  wave get https://api.example.com/users
  wave post https://api.example.com/users name=john age=30
  wave put https://api.example.com/users/1 Authorization:Bearer123 status=active
  wave post https://api.example.com/login --form user=john pass=secret

  Tokens after the URL are headers (key:value) or body fields (key=value);
  whichever separator comes first wins. Body fields are sent as JSON unless
  --form is given.

\b
COLLECTION MODE
───────────────
  wave -c myapi get-user-info
  wave -c myapi create-user Authorization:Bearer456 name=alice

  Looks up .wave/myapi.yaml (or .yml). Extra tokens override the
  collection's headers and body fields.

\b
COLLECTION FILE FORMAT (.wave/<name>.yaml)
──────────────────────────────────────────
  variables:
    base_url: https://api.example.com
  requests:
    - name: get-user-info
      method: GET
      url: ${base_url}/users/1
      headers:
        Authorization: Bearer ${env:API_TOKEN}
    - name: create-user
      method: POST
      url: ${base_url}/users
      body:
        json:                       # or form:
          name: alice

  ${name} reads a collection variable, ${env:NAME} an environment variable.
  Unresolved placeholders are errors.

\b
CONFIGURATION
─────────────
  -d/--dir      WAVE_DIR        collections directory (default .wave)
  --env-file    WAVE_ENV_FILE   dotenv file merged into the environment
  --timeout     WAVE_TIMEOUT    request timeout in seconds (default 30)
"""

EXAMPLE_COLLECTION = """\
# wave collection - run with: wave -c example get-post
variables:
  base_url: https://jsonplaceholder.typicode.com

requests:
  - name: get-post
    method: GET
    url: ${base_url}/posts/1

  - name: create-post
    method: POST
    url: ${base_url}/posts
    headers:
      Accept: application/json
    body:
      json:
        title: hello
        body: from wave
        userId: 1
"""


@click.command(
    help=TOOL_HELP,
    context_settings={"max_content_width": 88},
)
@click.argument("args", nargs=-1)
@click.option(
    "-c",
    "--collection",
    "collection_name",
    default=None,
    help="Collection name (file stem in the collections directory). "
    "The first argument is then the request name.",
)
@click.option(
    "-d",
    "--dir",
    "collections_dir",
    envvar="WAVE_DIR",
    default=None,
    help="Collections directory. Default: ./.wave",
)
@click.option(
    "--env-file",
    envvar="WAVE_ENV_FILE",
    default=None,
    help="dotenv file whose values are added to the environment for ${env:NAME}.",
)
@click.option(
    "--timeout",
    type=click.IntRange(min=1),
    envvar="WAVE_TIMEOUT",
    default=None,
    help="Request timeout in seconds. Default: 30.",
)
@click.option(
    "--form",
    is_flag=True,
    default=False,
    help="Send body fields as application/x-www-form-urlencoded.",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Print response headers.",
)
@click.option(
    "--list",
    "show_list",
    is_flag=True,
    default=False,
    help="List collections, or the requests of the collection given with -c.",
)
@click.option(
    "--init",
    "do_init",
    is_flag=True,
    default=False,
    help="Create the collections directory with an example collection.",
)
@click.option("--debug", is_flag=True, default=False, help="Log debug details to stderr.")
@click.version_option(__version__, prog_name="wave")
@click.pass_context
def main(
    ctx,
    args,
    collection_name,
    collections_dir,
    env_file,
    timeout,
    form,
    verbose,
    show_list,
    do_init,
    debug,
):
    """Build, send and print one HTTP request."""
    from wavecli.core import DEFAULT_TIMEOUT, load_env, resolve_collections_dir
    from wavecli.errors import WaveError
    from wavecli.executor import get_backend
    from wavecli.printer import format_response, sending_spinner

    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    directory = resolve_collections_dir(collections_dir)

    try:
        if do_init:
            _cmd_init(directory)
            return

        if show_list:
            _cmd_list(directory, collection_name)
            return

        if not args:
            click.echo(ctx.get_help())
            ctx.exit(1)

        env = load_env(env_file)
        request = _compose_request(args, collection_name, directory, form, env)

        backend = get_backend()
        with sending_spinner(request):
            response = backend.send(request, timeout=DEFAULT_TIMEOUT if timeout is None else timeout)
    except WaveError as e:
        _report_error(e)
        sys.exit(1)

    click.echo(format_response(response, verbose=verbose))


# ── Subcommand implementations ──────────────────────────────────────────


def _compose_request(args, collection_name, directory, form, env):
    """Turn positional arguments into a ResolvedRequest."""
    from wavecli.builder import build_request
    from wavecli.collection import load_collection
    from wavecli.tokens import classify_tokens

    if collection_name:
        request_name, tokens = args[0], args[1:]
        headers, fields = classify_tokens(tokens)
        collection = load_collection(collection_name, directory)
        template = collection.get_request(request_name)
        return build_request(
            template,
            headers=headers,
            fields=fields,
            form=form,
            variables=collection.variables,
            env=env,
        )

    method = args[0]
    url = args[1] if len(args) > 1 else None
    headers, fields = classify_tokens(args[2:])
    return build_request(
        method=method,
        url=url,
        headers=headers,
        fields=fields,
        form=form,
        env=env,
    )


def _cmd_list(directory: Path, collection_name: str | None):
    from wavecli.collection import list_collections, load_collection

    if collection_name:
        collection = load_collection(collection_name, directory)
        if not collection.requests:
            click.echo(f"Collection '{collection.name}' has no requests.")
            return
        click.echo(f"Requests in {collection.name} ({collection.path}):\n")
        width = max(len(r.name) for r in collection.requests)
        for req in collection.requests:
            click.echo(f"  {req.name:<{width}}  {req.method:<7} {req.url}")
        return

    names = list_collections(directory)
    if not names:
        click.echo(f"No collections found in: {directory}")
        click.echo("Run 'wave --init' to create one.")
        return
    click.echo(f"Collections in {directory}:\n")
    for name in names:
        click.echo(f"  {name}")


def _cmd_init(directory: Path):
    """Create the collections directory and an example collection."""
    if directory.exists():
        click.echo(f"  {directory}/ (skipped, already exists)")
    else:
        directory.mkdir(parents=True)
        click.echo(f"  {directory}/ (created)")

    example = directory / "example.yaml"
    if example.exists():
        click.echo(f"  {example} (skipped, already exists)")
    else:
        example.write_text(EXAMPLE_COLLECTION)
        click.echo(f"  {example} (created)")

    click.echo("\nRun 'wave -c example get-post' to try it.")


def _report_error(error):
    click.echo(f"ERROR: {error.message}", err=True)
    if error.suggestion:
        click.echo(f"Suggestion: {error.suggestion}", err=True)
