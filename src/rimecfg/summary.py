"""
At-a-glance summary of the effective configuration.

Collects the handful of settings a user checks most often from both
domains: enabled schemas and page size from ``default``, the appearance
and per-application options from ``squirrel``. Missing or mistyped
values fall back to the defaults Squirrel itself uses.
"""

from __future__ import annotations

import typing as _typing

import pydantic as _pydantic

import rimecfg.constants as constants
import rimecfg.domains as domains
import rimecfg.values as values

if _typing.TYPE_CHECKING:
    import rimecfg.store as store


class AppOption(_pydantic.BaseModel):
    """Per-application input options from ``app_options``."""

    model_config = _pydantic.ConfigDict(frozen=True)

    bundle_id: str
    ascii_mode: bool = False


class ConfigSummary(_pydantic.BaseModel):
    """Summary of the settings shown on a configuration overview."""

    model_config = _pydantic.ConfigDict(frozen=True)

    schema_list: list[str] = _pydantic.Field(default_factory=list)
    page_size: int = constants.DEFAULT_PAGE_SIZE
    color_scheme: str = constants.DEFAULT_COLOR_SCHEME
    font_face: str = constants.DEFAULT_FONT_FACE
    font_point: int = constants.DEFAULT_FONT_POINT
    app_options: list[AppOption] = _pydantic.Field(default_factory=list)

    @classmethod
    def from_manager(cls, manager: store.ConfigManager) -> ConfigSummary:
        default = domains.ConfigDomain.DEFAULT
        squirrel = domains.ConfigDomain.SQUIRREL

        entries = manager.get(default, "schema_list")
        schema_list = [
            entry["schema"]
            for entry in (entries if isinstance(entries, list) else [])
            if isinstance(entry, dict) and isinstance(entry.get("schema"), str)
        ]

        page_size = manager.int_value(default, "menu/page_size")
        color_scheme = values.as_str(manager.get(squirrel, "style/color_scheme"))
        font_face = values.as_str(manager.get(squirrel, "style/font_face"))
        font_point = manager.int_value(squirrel, "style/font_point")

        return cls(
            schema_list=schema_list,
            page_size=constants.DEFAULT_PAGE_SIZE if page_size is None else page_size,
            color_scheme=color_scheme or constants.DEFAULT_COLOR_SCHEME,
            font_face=font_face or constants.DEFAULT_FONT_FACE,
            font_point=constants.DEFAULT_FONT_POINT if font_point is None else font_point,
            app_options=_app_options(manager.get(squirrel, "app_options")),
        )


def _app_options(raw: _typing.Any) -> list[AppOption]:
    if not isinstance(raw, dict):
        return []
    options = []
    for bundle_id in sorted(raw):
        settings = raw[bundle_id]
        ascii_mode = settings.get("ascii_mode") if isinstance(settings, dict) else None
        options.append(AppOption(bundle_id=bundle_id, ascii_mode=ascii_mode is True))
    return options
