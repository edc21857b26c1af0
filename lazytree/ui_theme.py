"""UI theme definitions and selection helpers.

Themes are ANSI palettes for tree rows, search bar and status chrome. The
Pygments style used for JSON scalar values remains a separate setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers.

    Label decorators refer to colors by field name (``"table_icon"``), so
    every role a decorator may emit must exist here.
    """

    name: str
    reverse: str
    reset: str
    tree_marker: str
    label: str
    metadata: str
    match_highlight: str
    database_active: str
    database_inactive: str
    schema: str
    group: str
    table_icon: str
    view_icon: str
    materialized_view_icon: str
    function_icon: str
    procedure_icon: str
    trigger_function_icon: str
    sequence_icon: str
    type_icon: str
    extension_icon: str
    index_icon: str
    trigger_icon: str
    column_icon: str
    primary_key: str
    error: str
    json_key: str
    json_meta: str
    search_prompt: str
    search_query: str
    search_negate: str
    search_tag: str
    search_hint: str
    scroll_indicator: str
    empty_state: str


DEFAULT_THEME = UITheme(
    name="default",
    reverse="\033[7m",
    reset="\033[0m",
    tree_marker="\033[38;5;44m",
    label="\033[38;5;252m",
    metadata="\033[2;38;5;250m",
    match_highlight="\033[1;38;5;214m",
    database_active="\033[38;5;42m",
    database_inactive="\033[38;5;245m",
    schema="\033[1;34m",
    group="\033[38;5;110m",
    table_icon="\033[38;5;81m",
    view_icon="\033[38;5;141m",
    materialized_view_icon="\033[38;5;177m",
    function_icon="\033[38;5;214m",
    procedure_icon="\033[38;5;209m",
    trigger_function_icon="\033[38;5;220m",
    sequence_icon="\033[38;5;150m",
    type_icon="\033[38;5;180m",
    extension_icon="\033[38;5;117m",
    index_icon="\033[38;5;109m",
    trigger_icon="\033[38;5;203m",
    column_icon="\033[38;5;245m",
    primary_key="\033[1;38;5;221m",
    error="\033[38;5;196m",
    json_key="\033[38;5;110m",
    json_meta="\033[2;38;5;250m",
    search_prompt="\033[38;5;44m",
    search_query="\033[1;38;5;81m",
    search_negate="\033[1;38;5;196m",
    search_tag="\033[7;38;5;81m",
    search_hint="\033[2;38;5;250m",
    scroll_indicator="\033[38;5;44m",
    empty_state="\033[2;3;38;5;250m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reverse="\033[7m",
    reset="\033[0m",
    tree_marker="\033[38;5;39m",
    label="\033[38;5;153m",
    metadata="\033[2;38;5;110m",
    match_highlight="\033[1;38;5;215m",
    database_active="\033[38;5;84m",
    database_inactive="\033[38;5;67m",
    schema="\033[1;38;5;45m",
    group="\033[38;5;117m",
    table_icon="\033[38;5;45m",
    view_icon="\033[38;5;147m",
    materialized_view_icon="\033[38;5;183m",
    function_icon="\033[38;5;215m",
    procedure_icon="\033[38;5;216m",
    trigger_function_icon="\033[38;5;221m",
    sequence_icon="\033[38;5;114m",
    type_icon="\033[38;5;187m",
    extension_icon="\033[38;5;123m",
    index_icon="\033[38;5;73m",
    trigger_icon="\033[38;5;210m",
    column_icon="\033[38;5;110m",
    primary_key="\033[1;38;5;222m",
    error="\033[38;5;203m",
    json_key="\033[38;5;117m",
    json_meta="\033[2;38;5;110m",
    search_prompt="\033[38;5;39m",
    search_query="\033[1;38;5;45m",
    search_negate="\033[1;38;5;203m",
    search_tag="\033[7;38;5;45m",
    search_hint="\033[2;38;5;110m",
    scroll_indicator="\033[38;5;39m",
    empty_state="\033[2;3;38;5;110m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reverse="",
    reset="",
    tree_marker="",
    label="",
    metadata="",
    match_highlight="",
    database_active="",
    database_inactive="",
    schema="",
    group="",
    table_icon="",
    view_icon="",
    materialized_view_icon="",
    function_icon="",
    procedure_icon="",
    trigger_function_icon="",
    sequence_icon="",
    type_icon="",
    extension_icon="",
    index_icon="",
    trigger_icon="",
    column_icon="",
    primary_key="",
    error="",
    json_key="",
    json_meta="",
    search_prompt="",
    search_query="",
    search_negate="",
    search_tag="",
    search_hint="",
    scroll_indicator="",
    empty_state="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if not candidate:
        return DEFAULT_THEME.name
    if candidate == PLAIN_THEME.name:
        return DEFAULT_THEME.name
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    normalized = normalize_theme_name(name)
    return _THEMES.get(normalized, DEFAULT_THEME)


def theme_color(theme: UITheme, role: str) -> str:
    """Return the escape sequence for ``role``, or ``""`` for unknown roles."""
    if not role:
        return ""
    value = getattr(theme, role, "")
    return value if isinstance(value, str) else ""


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
    "theme_color",
]
