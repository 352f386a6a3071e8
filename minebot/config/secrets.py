"""Loading of reasoning-service credentials from dotenv files and the environment."""

from __future__ import annotations

import os
import stat
from pathlib import Path

from dotenv import load_dotenv

PROVIDER_ENV_KEYS: dict[str, str] = {
    "gemini": "GEMINI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}

_PLACEHOLDER_API_KEYS = frozenset(
    {
        "your_gemini_api_key_here",
        "your_openai_api_key_here",
        "your_anthropic_api_key_here",
        "your_api_key_here",
        "changeme",
        "replace_me",
    }
)


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_env_file(*, env_file: str | Path | None, start_dir: Path) -> Path | None:
    """Pick the dotenv file: explicit path, MINEBOT_ENV_FILE, cwd, project root."""
    env_path = env_file or os.environ.get("MINEBOT_ENV_FILE")
    if env_path:
        resolved = Path(env_path).expanduser()
        if not resolved.is_absolute():
            resolved = start_dir / resolved
        return resolved.resolve()

    for candidate in (start_dir / ".env", _project_root() / ".env"):
        if candidate.resolve().exists():
            return candidate.resolve()

    return None


def _validate_permissions(env_file: Path) -> None:
    """Reject dotenv files readable by other users on POSIX systems."""
    if os.name == "nt":
        return

    if env_file.is_symlink():
        raise PermissionError(f"Refusing to load dotenv symlink: {env_file}")

    file_stat = env_file.stat()
    if hasattr(os, "getuid") and file_stat.st_uid != os.getuid():
        raise PermissionError(f"Refusing to load dotenv owned by another user: {env_file}")

    if file_stat.st_mode & (stat.S_IRWXG | stat.S_IRWXO):
        raise PermissionError(
            f"Insecure dotenv permissions for {env_file}. Restrict access with chmod 600."
        )


def load_environment_secrets(
    env_file: str | Path | None = None,
    *,
    override: bool = False,
    strict: bool = True,
    start_dir: Path | None = None,
) -> Path | None:
    """Load API keys from a dotenv file into the process environment.

    Args:
        env_file: Optional dotenv path. If omitted, checks `MINEBOT_ENV_FILE`,
            then `.env` in the current working directory, then project root.
        override: Whether dotenv values override existing environment vars.
        strict: Whether an explicit but missing dotenv path should raise.
        start_dir: Base directory for resolving relative paths.

    Returns:
        Loaded dotenv path, or None when no dotenv file is found.
    """
    base_dir = (start_dir or Path.cwd()).resolve()
    resolved = _resolve_env_file(env_file=env_file, start_dir=base_dir)
    if resolved is None:
        return None

    if not resolved.exists():
        if strict:
            raise FileNotFoundError(f"Dotenv file not found: {resolved}")
        return None
    if not resolved.is_file():
        raise ValueError(f"Dotenv path is not a regular file: {resolved}")

    _validate_permissions(resolved)
    load_dotenv(dotenv_path=str(resolved), override=override)
    return resolved


def resolve_api_key(provider: str, explicit: str | None = None) -> str | None:
    """Return the API key for a provider, ignoring template placeholders.

    Args:
        provider: "gemini", "anthropic" or "openai".
        explicit: Key passed on the command line, preferred when set.

    Returns:
        The key, or None when no usable key is configured.
    """
    candidate = explicit or os.environ.get(PROVIDER_ENV_KEYS.get(provider, ""), "")
    candidate = candidate.strip()
    if not candidate or candidate.lower() in _PLACEHOLDER_API_KEYS:
        return None
    return candidate
