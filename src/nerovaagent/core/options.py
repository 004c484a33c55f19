"""Option resolution: raw tokens -> ParsedOptions -> RunRequest."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from ..errors import FileReadError, MissingPromptError
from ..models.run import RunRequest

# flag -> ParsedOptions attribute; each consumes exactly one following token
VALUE_FLAGS: dict[str, str] = {
    "--prompt-file": "prompt_file",
    "--prompt": "prompt",
    "--context": "context",
    "--context-file": "context_file",
    "--critic-key": "critic_key",
    "--assistant-key": "assistant_key",
    "--assistant-id": "assistant_id",
}


@dataclass
class ParsedOptions:
    prompt_file: Optional[str] = None
    prompt: Optional[str] = None
    context: Optional[str] = None
    context_file: Optional[str] = None
    critic_key: Optional[str] = None
    assistant_key: Optional[str] = None
    assistant_id: Optional[str] = None
    positional: list[str] = field(default_factory=list)


def parse_args(argv: Sequence[str]) -> ParsedOptions:
    """Split tokens into recognized flag values and positional tokens.

    A recognized flag takes the next token as its value whatever it looks
    like. A flag with no (or an empty) following token is kept as a
    positional token instead of raising; later occurrences of a flag win.
    """
    options = ParsedOptions()
    i = 0
    while i < len(argv):
        token = argv[i]
        following = argv[i + 1] if i + 1 < len(argv) else None
        attr = VALUE_FLAGS.get(token)
        if attr is not None and following:
            setattr(options, attr, following)
            i += 2
            continue
        options.positional.append(token)
        i += 1
    return options


def read_text_file(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        cause = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
        raise FileReadError(path, cause) from e


def resolve_prompt(options: ParsedOptions) -> str:
    """--prompt, else --prompt-file contents, else positional tokens joined.

    Raises MissingPromptError if the winner is empty after trimming.
    """
    prompt = options.prompt
    if not prompt and options.prompt_file:
        prompt = read_text_file(options.prompt_file)
    if not prompt and options.positional:
        prompt = " ".join(options.positional)
    if not prompt or not prompt.strip():
        raise MissingPromptError()
    return prompt.strip()


def resolve_context(options: ParsedOptions) -> str:
    """--context, else --context-file contents, else empty."""
    context = options.context or ""
    if not context and options.context_file:
        context = read_text_file(options.context_file)
    return context.strip()


def _key(flag_value: Optional[str], configured: object) -> Optional[str]:
    value = flag_value or configured
    return str(value) if value else None


def build_run_request(options: ParsedOptions, config: dict) -> RunRequest:
    """Resolve everything ``start`` sends. Flags beat config-derived keys."""
    keys = config.get("keys") or {}
    return RunRequest(
        prompt=resolve_prompt(options),
        context_notes=resolve_context(options),
        critic_key=_key(options.critic_key, keys.get("critic_key")),
        assistant_key=_key(options.assistant_key, keys.get("assistant_key")),
        assistant_id=_key(options.assistant_id, keys.get("assistant_id")),
    )
