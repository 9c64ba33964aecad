"""wave core - config resolution, environment loading, placeholder expansion."""

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from wavecli.errors import MalformedPlaceholder, UnresolvedEnvVar, UnresolvedVariable

logger = logging.getLogger(__name__)

DEFAULT_COLLECTIONS_DIR = ".wave"
DEFAULT_TIMEOUT = 30
COLLECTION_EXTENSIONS = (".yaml", ".yml")

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
ENV_PREFIX = "env:"


def resolve_collections_dir(cli_dir: str | None) -> Path:
    """Return the collections directory to use.

    Resolution order:
      1. -d/--dir flag or WAVE_DIR (click merges the two)
      2. ./.wave in CWD

    Relative paths resolve from CWD. The directory is not required to exist;
    the loader reports what it searched.
    """
    p = Path(cli_dir) if cli_dir else Path(DEFAULT_COLLECTIONS_DIR)
    if not p.is_absolute():
        p = Path.cwd() / p
    return p


def load_env(env_file: str | None = None, base_env: Mapping[str, str] | None = None) -> dict[str, str]:
    """Snapshot the environment table used for ${env:NAME} lookups.

    Starts from base_env (os.environ when omitted). Values from env_file,
    a dotenv file, take precedence; keys declared without a value are skipped.
    """
    env = dict(os.environ if base_env is None else base_env)
    if env_file:
        dotenv_path = Path(env_file)
        if dotenv_path.exists():
            dotenv_vars = dotenv_values(str(dotenv_path))
            env.update({k: v for k, v in dotenv_vars.items() if v is not None})
            logger.debug("loaded %d entries from %s", len(dotenv_vars), dotenv_path)
        else:
            logger.warning("env file %s does not exist, ignoring", dotenv_path)
    return env


def resolve_vars(
    text: str,
    variables: Mapping[str, str] | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Expand ${name} and ${env:NAME} placeholders in text.

    Single pass, left to right. Substituted values are copied as-is and never
    scanned again, so a variable whose value contains "${...}" stays literal.
    Every placeholder must resolve: a missing name raises instead of
    producing an empty string.
    """
    if "${" not in text:
        return text

    variables = variables or {}
    env = env if env is not None else {}

    out: list[str] = []
    pos = 0
    while True:
        start = text.find("${", pos)
        if start == -1:
            out.append(text[pos:])
            break
        out.append(text[pos:start])

        end = text.find("}", start + 2)
        if end == -1:
            raise MalformedPlaceholder(text, "unterminated '${'")
        name = text[start + 2 : end]

        if name.startswith(ENV_PREFIX):
            env_name = name[len(ENV_PREFIX) :]
            _check_identifier(text, env_name)
            if env_name not in env:
                raise UnresolvedEnvVar(env_name)
            out.append(env[env_name])
        else:
            _check_identifier(text, name)
            if name not in variables:
                raise UnresolvedVariable(name)
            out.append(variables[name])

        pos = end + 1

    return "".join(out)


def _check_identifier(text: str, name: str) -> None:
    if not name:
        raise MalformedPlaceholder(text, "empty placeholder name")
    if not IDENTIFIER_RE.match(name):
        raise MalformedPlaceholder(text, f"'{name}' is not a valid identifier")


def resolve_in_obj(
    obj: Any,
    variables: Mapping[str, str] | None = None,
    env: Mapping[str, str] | None = None,
) -> Any:
    """Recursively resolve placeholders in dicts, lists, and strings."""
    if isinstance(obj, str):
        return resolve_vars(obj, variables, env)
    if isinstance(obj, dict):
        return {k: resolve_in_obj(v, variables, env) for k, v in obj.items()}
    if isinstance(obj, list):
        return [resolve_in_obj(item, variables, env) for item in obj]
    return obj
