"""User configuration: defaults, config.yaml and MDF_* environment overrides."""

import os
from typing import List

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from .home import Home
from .logger import get_logger

logger = get_logger("config")

DEFAULT_REPO_NAME = "local/repo"
DEFAULT_BORDER_PADDING = "-"
DEFAULT_BORDER_LENGTH = 39

# Fixed keys, not configurable
QUIT_KEYS = ["q", "ctrl+c"]
SEARCH_KEYS = ["/"]
TOGGLE_HELP_KEYS = ["?"]
MOVE_SNIPPET_DOWN_KEYS = ["J"]
MOVE_SNIPPET_UP_KEYS = ["K"]

PANES = ("snippet", "section", "content")


class Config(BaseModel):
    """All user-tunable settings. Field names double as config.yaml keys."""

    repo_name: str = DEFAULT_REPO_NAME
    folder_name: str = ""
    repo_config_file: str = "repo-config.json"
    snippet_config_file: str = "snippet-config.json"

    default_pane: str = "section"
    always_show_snippet_pane: bool = False
    exit_after_copy: bool = False

    base_margin_top: int = 1
    snippet_title_bar_width: int = 33
    section_title_bar_width: int = 33
    content_title_bar_width: int = 86
    snippet_list_margin_left: int = 1

    focused_bar_bg_color: str = "62"
    focused_bar_fg_color: str = "255"
    blurred_bar_bg_color: str = "103"
    blurred_bar_fg_color: str = "255"
    selected_item_fg_color: str = "170"
    unselected_item_fg_color: str = "252"
    copied_bar_bg_color: str = "42"
    copied_bar_fg_color: str = "238"
    copied_item_fg_color: str = "42"
    content_line_number_fg_color: str = "241"

    theme: str = "dracula"
    code_block_border_padding: str = DEFAULT_BORDER_PADDING
    code_block_border_length: int = DEFAULT_BORDER_LENGTH
    code_block_title_copy: str = "Press {key} to copy"
    code_block_prefix: str = "------------------BEG------------------"
    code_block_suffix: str = "------------------END------------------"

    copy_content_keys: List[str] = ["c", "d", "e", "f", "g"]
    edit_snippet_keys: List[str] = ["i"]
    next_pane_keys: List[str] = ["n", "tab", "right"]
    prev_pane_keys: List[str] = ["N", "shift+tab", "left"]
    toggle_snippet_pane_keys: List[str] = ["s", "p"]

    @field_validator("code_block_border_padding")
    @classmethod
    def _single_padding_char(cls, value: str) -> str:
        value = value.strip()
        return value[0] if value else DEFAULT_BORDER_PADDING

    @field_validator("code_block_border_length")
    @classmethod
    def _positive_border_length(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_BORDER_LENGTH

    @field_validator("default_pane")
    @classmethod
    def _known_pane(cls, value: str) -> str:
        value = value.strip().lower()
        return value if value in PANES else "section"

    @property
    def border_default(self) -> str:
        """Plain border drawn around untitled code blocks."""
        return self.code_block_border_padding * self.code_block_border_length

    @property
    def copy_exit_keys(self) -> List[str]:
        """Upper-cased copy keys: copy then quit."""
        return [key.upper() for key in self.copy_content_keys]


def _env_overrides() -> dict:
    """Collect MDF_* environment values for known fields."""
    overrides = {}
    for name, field in Config.model_fields.items():
        raw = os.getenv(f"MDF_{name.upper()}")
        if raw is None:
            continue
        if field.annotation == List[str]:
            overrides[name] = [part.strip() for part in raw.split(",") if part.strip()]
        else:
            overrides[name] = raw
    return overrides


def save_config(config: Config, home: Home) -> None:
    """Write the configuration to config.yaml."""
    data = config.model_dump()
    try:
        with open(home.config_file, "w") as f:
            yaml.safe_dump(data, f, indent=2, sort_keys=False, allow_unicode=True)
    except OSError as e:
        logger.error(f"Unable to write config file {home.config_file}: {e}")


def load_config(home: Home) -> Config:
    """Load config.yaml, creating it with defaults when missing.

    Environment variables named ``MDF_<FIELD>`` (after loading a ``.env``)
    override the file. An unreadable or invalid file falls back to defaults.
    """
    load_dotenv()

    file_values: dict = {}
    if not home.config_file.exists():
        logger.info(f"Creating default config at {home.config_file}")
        save_config(Config(), home)
    else:
        try:
            with open(home.config_file) as f:
                loaded = yaml.safe_load(f)
            if isinstance(loaded, dict):
                file_values = loaded
            elif loaded is not None:
                logger.warning(f"Ignoring malformed config file {home.config_file}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Unable to read config file, using defaults: {e}")

    try:
        config = Config(**file_values)
    except ValidationError as e:
        logger.warning(f"Invalid config values, using defaults: {e}")
        config = Config()

    overrides = _env_overrides()
    if overrides:
        try:
            config = Config(**{**config.model_dump(), **overrides})
        except ValidationError as e:
            logger.warning(f"Ignoring invalid MDF_* environment values: {e}")

    return config
