"""Main CLI entrypoint for markpatch."""

import codecs
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import click

from ..config import load_jobs, resolve_artifact
from ..errors import ArtifactIOError, ConfigError, InvalidDescriptorError
from ..patcher import PatchDescriptor, PatchJob, PatchResult, PatchStatus, apply_patches
from ..presets import get_preset, list_presets

DEFAULT_ENCODING = 'utf-8'


@click.group()
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, output_json, verbose):
    """markpatch - Idempotent patching of generated build artifacts."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = output_json
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


def _json_output(data: Any) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=None))


def _human_output(message: str, err: bool = False) -> None:
    """Output human-readable message."""
    if not click.get_current_context().obj.get('json', False):
        click.echo(message, err=err)


def _validate_encoding(ctx, param, value):
    if value is None:
        return value
    try:
        codecs.lookup(value)
    except LookupError:
        raise click.BadParameter(f"unknown encoding: {value}")
    return value


def _fail(message: str, code: int) -> None:
    if click.get_current_context().obj.get('json', False):
        _json_output({'error': message})
    else:
        click.echo(f"❌ {message}", err=True)
    sys.exit(code)


PATCH_OPTIONS = [
    click.option('--preset', help='Built-in preset name (see `markpatch presets`)'),
    click.option('--config', 'config_path', type=click.Path(dir_okay=False), help='YAML/JSON patch configuration file'),
    click.option('--artifact', help='Artifact path (overrides the preset default)'),
    click.option('--marker', help='Sentinel proving the patch was applied'),
    click.option('--anchor', help='Substring the payload is inserted before'),
    click.option('--payload', help='Text to insert'),
    click.option('--payload-file', type=click.Path(exists=True, dir_okay=False), help='Read the payload from a file'),
    click.option('--separator', help='Text written after the marker and after the payload (inline only)'),
    click.option('--encoding', callback=_validate_encoding, help='Artifact text encoding [default: utf-8]'),
    click.option('--root', type=click.Path(file_okay=False), help='Directory relative artifact paths resolve against'),
]


def patch_options(func):
    """Options shared by every command that selects patch jobs."""
    for option in reversed(PATCH_OPTIONS):
        func = option(func)
    return func


def _resolve_jobs(
    preset: Optional[str],
    config_path: Optional[str],
    artifact: Optional[str],
    marker: Optional[str],
    anchor: Optional[str],
    payload: Optional[str],
    payload_file: Optional[str],
    separator: Optional[str],
    encoding: Optional[str],
    root: Optional[str],
) -> List[PatchJob]:
    inline = any(v is not None for v in (marker, anchor, payload, payload_file))
    sources = sum([preset is not None, config_path is not None, inline])
    if sources != 1:
        raise click.UsageError('Choose exactly one of --preset, --config, or --marker/--anchor/--payload')
    if separator is not None and not inline:
        raise click.UsageError('--separator only applies to --marker/--anchor/--payload')

    if preset is not None:
        found = get_preset(preset)
        if found is None:
            names = ', '.join(p.name for p in list_presets())
            raise click.UsageError(f"Unknown preset: {preset} (available: {names})")
        return [PatchJob(
            artifact=resolve_artifact(artifact or found.artifact, root),
            descriptor=found.descriptor,
            encoding=encoding or DEFAULT_ENCODING,
            hint=found.hint,
        )]

    if config_path is not None:
        if artifact:
            raise click.UsageError('--artifact cannot be combined with --config')
        if encoding is not None:
            raise click.UsageError('--encoding cannot be combined with --config; set it per patch in the file')
        return load_jobs(config_path, root=root)

    if not artifact or marker is None or anchor is None:
        raise click.UsageError('--artifact, --marker and --anchor are required without --preset/--config')
    if (payload is None) == (payload_file is None):
        raise click.UsageError('Give exactly one of --payload or --payload-file')
    encoding = encoding or DEFAULT_ENCODING
    if payload_file is not None:
        try:
            with open(payload_file, 'r', encoding=encoding, newline='') as f:
                payload = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise click.UsageError(f"Cannot read payload file {payload_file}: {e}")
    try:
        descriptor = PatchDescriptor(marker=marker, anchor=anchor, payload=payload, separator=separator or '')
    except InvalidDescriptorError as e:
        raise click.UsageError(str(e))
    return [PatchJob(artifact=resolve_artifact(artifact, root), descriptor=descriptor, encoding=encoding)]


def _report(result: PatchResult) -> None:
    if result.ok:
        _human_output(f"✅ {result.message}")
        return
    _human_output(f"❌ {result.message}", err=True)
    if result.status == PatchStatus.ARTIFACT_MISSING and result.hint:
        _human_output(result.hint, err=True)
    elif result.status == PatchStatus.ANCHOR_MISSING:
        _human_output("The artifact layout may have changed; review the anchor.", err=True)


def _run(options: Dict[str, Any], dry_run: bool) -> None:
    try:
        jobs = _resolve_jobs(**options)
        results = apply_patches(jobs, dry_run=dry_run)
    except ConfigError as e:
        _fail(str(e), 2)
    except ArtifactIOError as e:
        _fail(str(e), 1)

    if click.get_current_context().obj.get('json', False):
        _json_output({'results': [r.to_dict() for r in results]})
    else:
        for result in results:
            _report(result)

    sys.exit(0 if all(r.ok for r in results) else 1)


@main.command()
@patch_options
@click.option('--dry-run', is_flag=True, help='Report what would happen without writing')
def apply(dry_run, **options):
    """Apply a patch to a generated artifact, at most once."""
    _run(options, dry_run=dry_run)


@main.command()
@patch_options
def check(**options):
    """Report whether an artifact is patched or patchable, without writing."""
    _run(options, dry_run=True)


@main.command()
def presets():
    """List built-in presets."""
    available = list_presets()
    if click.get_current_context().obj.get('json', False):
        _json_output([
            {'name': p.name, 'artifact': p.artifact, 'description': p.description}
            for p in available
        ])
        return
    for p in available:
        click.echo(f"{p.name:<20} {p.artifact}")
        click.echo(f"{'':<20} {p.description}")


if __name__ == '__main__':
    main()
