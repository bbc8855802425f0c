"""Environment utilities."""

import os


def _resolve_env(value, env_key=None):
    """Return ``value`` or fall back to the ``env_key`` environment variable.

    Strings wrapped like ``"${VAR}"`` are also resolved from ``VAR``.
    """

    if value is None or value == "":
        return os.getenv(env_key) if env_key else value
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return os.getenv(value[2:-1])
    return value


def env_str(name: str, default=None):
    """Return a stripped env value, treating blank strings as unset."""
    v = os.getenv(name)
    return v.strip() if (v is not None and v.strip() != "") else default


__all__ = ["_resolve_env", "env_str"]
