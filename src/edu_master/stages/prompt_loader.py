"""Stage prompts bundled as YAML under ``edu_master/prompts``.

Each file holds the persona (``system_prompt``) and the bracket-tag
payload (``user_prompt_template``) with ``{placeholder}`` slots.
"""

import re
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


class PromptData(BaseModel):
    version: str = "unknown"
    system_prompt: str
    user_prompt_template: str


def load_prompt(path: str | Path) -> PromptData:
    """Read and validate one prompt file.

    Raises:
        FileNotFoundError: No file at ``path``.
        ValidationError: A required key is missing.
    """
    prompt_path = Path(path)
    if not prompt_path.is_file():
        raise FileNotFoundError(f"Prompt file not found: {prompt_path}")
    return PromptData.model_validate(yaml.safe_load(prompt_path.read_text(encoding="utf-8")))


@lru_cache(maxsize=16)
def load_stage_prompt(name: str) -> PromptData:
    """``load_stage_prompt("planner")`` reads ``prompts/planner.yaml`` once."""
    return load_prompt(PROMPTS_DIR / f"{name}.yaml")


def format_user_prompt(template: str, **values: str) -> str:
    """Substitute ``{name}`` slots from ``values`` in one regex pass.

    User text that itself contains ``{...}`` is inserted as-is and not
    expanded again; slots without a value stay in the output.
    """
    return _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), template)
