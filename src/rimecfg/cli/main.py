"""
Main CLI entry point for rimecfg.

Provides the command-line interface using Click. Every command works on
one domain (``-d default`` or ``-d squirrel``); edits are flushed to the
patch file before the command exits.
"""

import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import click as _click
import pydantic as _pydantic
import yaml as _yaml

import rimecfg
import rimecfg.config as config
import rimecfg.domains as domains
import rimecfg.schemas as schemas
import rimecfg.storage as storage
import rimecfg.store as store
import rimecfg.summary as summary
import rimecfg.values as values

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_DOMAIN_OPTION = _click.option(
    "-d",
    "--domain",
    type=_click.Choice([domain.value for domain in domains.ConfigDomain]),
    default=domains.ConfigDomain.DEFAULT.value,
    show_default=True,
    help="Configuration domain",
)


def _configure_logging(verbose: bool) -> None:
    _logging.basicConfig(
        level=_logging.DEBUG if verbose else _logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _get_manager(ctx: _click.Context) -> store.ConfigManager:
    """Create the manager on first use; it is closed when the CLI exits."""
    obj = ctx.find_root().obj
    manager: store.ConfigManager | None = obj.get("manager")
    if manager is None:
        manager = store.ConfigManager.from_settings(obj["settings"])
        obj["manager"] = manager
        ctx.find_root().call_on_close(manager.close)
    return manager


def _check(status: storage.WriteStatus) -> None:
    if not status.ok:
        raise _click.ClickException(status.message)


def _flush(manager: store.ConfigManager) -> None:
    for status in manager.flush():
        _check(status)


def _dump(value: _typing.Any, as_json: bool) -> str:
    if as_json:
        return _json.dumps(value, indent=2, ensure_ascii=False)
    if isinstance(value, dict):
        return storage.dump_yaml(value).rstrip("\n")
    return values.format_value(value)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(rimecfg.__version__, "-V", "--version", prog_name="rimecfg")
@_click.option(
    "--rime-dir",
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    default=None,
    help="Rime user directory (default: settings, then ~/Library/Rime)",
)
@_click.option("-v", "--verbose", is_flag=True, help="Log debug output")
@_click.pass_context
def cli(ctx: _click.Context, rime_dir: _pathlib.Path | None, verbose: bool) -> None:
    """rimecfg - view and customize Rime input method configuration.

    Values come from <domain>.yaml merged with the 'patch' map of
    <domain>.custom.yaml. Edits only ever touch the .custom.yaml file.
    """
    overrides: dict[str, _typing.Any] = {}
    if rime_dir is not None:
        overrides["rime_dir"] = rime_dir
    if verbose:
        overrides["verbose"] = True

    try:
        settings = config.Settings(**overrides)
    except config.ConfigFileError as e:
        raise _click.ClickException(str(e)) from None
    except _pydantic.ValidationError as e:
        raise _click.ClickException(f"Invalid settings: {e}") from None

    _configure_logging(settings.verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@_DOMAIN_OPTION
@_click.argument("path")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def get(ctx: _click.Context, domain: str, path: str, as_json: bool) -> None:
    """Show the effective value at PATH (e.g. menu/page_size)."""
    value = _get_manager(ctx).get(domain, path)
    if value is None:
        raise _click.ClickException(f"{path} is not set in {domain}")
    _click.echo(_dump(value, as_json))


@cli.command(name="set")
@_DOMAIN_OPTION
@_click.argument("path")
@_click.argument("value")
@_click.pass_context
def set_cmd(ctx: _click.Context, domain: str, path: str, value: str) -> None:
    """Customize PATH with VALUE, parsed as YAML.

    Examples:
        rimecfg set menu/page_size 7
        rimecfg -d squirrel set style/font_face "PingFang SC"
        rimecfg set key_binder/page_pair '[[minus, equal]]'
    """
    try:
        parsed = _yaml.safe_load(value) if value.strip() else value
    except _yaml.YAMLError as e:
        raise _click.ClickException(f"Invalid YAML value: {e}") from None

    manager = _get_manager(ctx)
    try:
        manager.set(domain, path, parsed)
    except ValueError as e:
        raise _click.ClickException(str(e)) from None
    _flush(manager)
    _click.echo(f"{path} = {values.format_value(manager.get(domain, path))}")


@cli.command()
@_DOMAIN_OPTION
@_click.argument("path")
@_click.pass_context
def unset(ctx: _click.Context, domain: str, path: str) -> None:
    """Remove the customization of PATH, restoring the base value."""
    manager = _get_manager(ctx)
    if not manager.is_customized(domain, path):
        _click.echo(f"{path} is not customized")
        return
    _check(manager.remove(domain, path))
    _click.echo(f"Removed {path}")


@cli.command()
@_DOMAIN_OPTION
@_click.option("--customized", is_flag=True, help="Only list customized keys")
@_click.option("--filter", "pattern", default=None, help="Only list keys containing TEXT")
@_click.pass_context
def keys(ctx: _click.Context, domain: str, customized: bool, pattern: str | None) -> None:
    """List the leaf paths of the effective configuration.

    Customized keys are marked with '*'.
    """
    manager = _get_manager(ctx)
    for key in manager.list_keys(domain):
        if pattern and pattern.lower() not in key.lower():
            continue
        is_customized = manager.is_customized(domain, key)
        if customized and not is_customized:
            continue
        _click.echo(f"{'*' if is_customized else ' '} {key}")


@cli.command()
@_DOMAIN_OPTION
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def show(ctx: _click.Context, domain: str, as_json: bool) -> None:
    """Show the whole effective configuration."""
    manager = _get_manager(ctx)
    if manager.is_fallback(domain):
        _click.echo(f"# No {domain} files found; showing example configuration", err=True)
    _click.echo(_dump(manager.merged_config(domain), as_json))


@cli.command(name="summary")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def summary_cmd(ctx: _click.Context, as_json: bool) -> None:
    """Show an overview of the most used settings."""
    result = summary.ConfigSummary.from_manager(_get_manager(ctx))
    if as_json:
        _click.echo(result.model_dump_json(indent=2))
        return

    _click.echo("Rime Configuration:")
    _click.echo(f"  Schemas: {', '.join(result.schema_list) or '(none)'}")
    _click.echo(f"  Page Size: {result.page_size}")
    _click.echo(f"  Color Scheme: {result.color_scheme}")
    _click.echo(f"  Font: {result.font_face} {result.font_point}pt")
    if result.app_options:
        _click.echo("  App Options:")
        for option in result.app_options:
            mode = "ascii" if option.ascii_mode else "default"
            _click.echo(f"    {option.bundle_id}: {mode}")


# =============================================================================
# Raw patch file
# =============================================================================


@cli.group()
def raw() -> None:
    """Read or replace a domain's .custom.yaml file."""


@raw.command(name="show")
@_DOMAIN_OPTION
@_click.pass_context
def raw_show(ctx: _click.Context, domain: str) -> None:
    """Print the patch file."""
    _click.echo(_get_manager(ctx).load_raw_text(domain), nl=False)


@raw.command(name="save")
@_DOMAIN_OPTION
@_click.argument("source", type=_click.File("r", encoding="utf-8"))
@_click.pass_context
def raw_save(ctx: _click.Context, domain: str, source: _typing.TextIO) -> None:
    """Replace the patch file with the content of SOURCE ('-' for stdin)."""
    content = source.read()
    try:
        _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        _click.echo(f"Warning: content is not valid YAML: {e}", err=True)
    manager = _get_manager(ctx)
    status = manager.save_raw_text(domain, content)
    _check(status)
    _click.echo(status.message)


# =============================================================================
# Schemas
# =============================================================================


@cli.group(name="schemas")
def schemas_cmd() -> None:
    """List, add and delete input schemas."""


@schemas_cmd.command(name="list")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def schemas_list(ctx: _click.Context, as_json: bool) -> None:
    """List available schemas; enabled ones are marked with '✓'."""
    catalog = schemas.SchemaCatalog(_get_manager(ctx))
    enabled = set(catalog.enabled())
    available = catalog.available()
    if as_json:
        entries = [
            {
                "schema_id": info.schema_id,
                "name": info.name,
                "builtin": info.is_builtin,
                "enabled": info.schema_id in enabled,
            }
            for info in available
        ]
        _click.echo(_json.dumps(entries, indent=2, ensure_ascii=False))
        return

    if not available:
        _click.echo("No schemas found.")
        return
    for info in available:
        status = "✓" if info.schema_id in enabled else " "
        origin = "" if info.is_builtin else " (installed)"
        _click.echo(f"{status} {info.schema_id}: {info.name}{origin}")


@schemas_cmd.command(name="add")
@_click.argument("schema_id")
@_click.argument("name")
@_click.pass_context
def schemas_add(ctx: _click.Context, schema_id: str, name: str) -> None:
    """Create a minimal SCHEMA_ID.schema.yaml named NAME."""
    catalog = schemas.SchemaCatalog(_get_manager(ctx))
    try:
        status = catalog.add(schema_id, name)
    except ValueError as e:
        raise _click.ClickException(str(e)) from None
    _check(status)
    _click.echo(status.message)


@schemas_cmd.command(name="delete")
@_click.argument("schema_id")
@_click.pass_context
def schemas_delete(ctx: _click.Context, schema_id: str) -> None:
    """Delete SCHEMA_ID.schema.yaml and drop it from a customized schema list."""
    catalog = schemas.SchemaCatalog(_get_manager(ctx))
    try:
        status = catalog.delete(schema_id)
    except ValueError as e:
        raise _click.ClickException(str(e)) from None
    _check(status)
    _click.echo(status.message)


# =============================================================================
# Settings
# =============================================================================


@cli.group()
def config_cmd() -> None:
    """Settings commands."""


# Register config_cmd with the name "config" to avoid shadowing the module
cli.add_command(config_cmd, name="config")


@config_cmd.command(name="path")
@_click.pass_context
def config_path(ctx: _click.Context) -> None:
    """Show settings and configuration file locations.

    Examples:
        rimecfg config path
    """
    settings: config.Settings = ctx.find_root().obj["settings"]
    paths = [("Settings file", config.get_user_config_path())]
    for domain in domains.ConfigDomain:
        paths.append((f"{domain.value} base", domain.base_path(settings.rime_dir)))
        paths.append((f"{domain.value} patch", domain.patch_path(settings.rime_dir)))

    _click.echo(f"Rime directory: {settings.rime_dir}")
    for name, path in paths:
        status = "✓" if path.exists() else "✗"
        _click.echo(f"{status} {name}: {path}")


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="rimecfg")


if __name__ == "__main__":
    main()
