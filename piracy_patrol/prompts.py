from __future__ import annotations

import os
from pathlib import Path


class PromptLoadError(RuntimeError):
    pass


def prompts_dir() -> Path:
    """Directory holding the narrator prompts.

    `PIRACY_PATROL_PROMPTS_DIR` points at a replacement set (e.g. a translated
    persona); otherwise the repo's `prompts/` is used.
    """

    override = os.environ.get("PIRACY_PATROL_PROMPTS_DIR")
    if override:
        return Path(override)
    # piracy_patrol/prompts.py -> piracy_patrol/ -> project root
    return Path(__file__).resolve().parents[1] / "prompts"


def load_prompt(name: str) -> str:
    path = prompts_dir() / name
    try:
        return path.read_text(encoding="utf-8").strip() + "\n"
    except FileNotFoundError as e:
        raise PromptLoadError(f"Prompt not found: {path}") from e


def render_prompt(name: str, **values: object) -> str:
    """Load `name` and fill its `{placeholders}` from `values`."""

    template = load_prompt(name)
    try:
        return template.format(**values)
    except KeyError as e:
        raise PromptLoadError(f"Prompt {name} needs a value for {e.args[0]!r}") from e
