"""
StudioTone Command Line Interface

Runs the enhancement pipeline once on an image file: analyze its
histogram, suggest automatic settings, or render an enhanced copy.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click
import yaml

from .config import load_config, get_config_value
from .exceptions import DecodeFailure
from .models import EnhancementParameters, FilterParameters, FeatureToggles
from .analysis import HistogramAnalyzer
from .processing import AutoEnhanceEstimator, FilterChain
from .io import load_image_file, save_image_file
from .utils.logging import setup_console_logging, DEFAULT_FORMAT

logger = logging.getLogger(__name__)


def _analyzer(config) -> HistogramAnalyzer:
    return HistogramAnalyzer(max_edge=get_config_value(config, 'enhancement.analysis_max_edge', 300))


def _load(path: str):
    try:
        return load_image_file(path)
    except DecodeFailure as e:
        raise click.ClickException(str(e))


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True, dir_okay=False),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    StudioTone - adaptive photo enhancement

    Analyzes a photo, estimates brightness, contrast, saturation, warmth and
    tone curve corrections, and renders the enhanced result.
    """
    ctx.ensure_object(dict)
    ctx.obj['config'] = load_config(config)
    ctx.obj['quiet'] = quiet

    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'
    else:
        level = get_config_value(ctx.obj['config'], 'logging.level', 'INFO')
    setup_console_logging(level, fmt=get_config_value(ctx.obj['config'], 'logging.format', DEFAULT_FORMAT))


@main.command()
@click.argument('image', type=click.Path(exists=True, dir_okay=False))
@click.option('--json', 'as_json', is_flag=True, help='Print statistics as JSON')
@click.option('--histogram', is_flag=True, help='Include the 256-bucket histogram')
@click.pass_context
def analyze(ctx, image: str, as_json: bool, histogram: bool):
    """
    Print luminance and channel statistics of IMAGE.
    """
    buffer = _load(image)
    stats = _analyzer(ctx.obj['config']).analyze(buffer)
    data = stats.to_dict(include_histogram=histogram)

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"Image:       {image} ({buffer.width}x{buffer.height})")
    click.echo(f"Samples:     {stats.pixel_count}")
    click.echo(f"Luminance:   mean {stats.mean_luminance:.1f}, std {stats.std_luminance:.1f}, "
               f"range {stats.min_luminance}-{stats.max_luminance}")
    click.echo(f"Percentiles: p2 {stats.p2}, p98 {stats.p98}")
    click.echo(f"Channels:    R {stats.mean_red:.1f}, G {stats.mean_green:.1f}, B {stats.mean_blue:.1f}")


@main.command()
@click.argument('image', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def suggest(ctx, image: str):
    """
    Print the automatic enhancement parameters for IMAGE as YAML.
    """
    buffer = _load(image)
    stats = _analyzer(ctx.obj['config']).analyze(buffer)
    params = AutoEnhanceEstimator().estimate_parameters(stats)
    click.echo(yaml.safe_dump(params.to_dict(), default_flow_style=False, sort_keys=False))


@main.command()
@click.argument('image', type=click.Path(exists=True, dir_okay=False))
@click.argument('output', type=click.Path(dir_okay=False))
@click.option('--auto', 'auto_enhance', is_flag=True, help='Start from automatic settings')
@click.option('--params', 'params_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML parameter file (as written by --save-params)')
@click.option('--brightness', type=float, help='Brightness percent (50-150)')
@click.option('--contrast', type=float, help='Contrast percent (50-150)')
@click.option('--saturation', type=float, help='Saturation percent (0-200)')
@click.option('--warmth', type=float, help='Warmth (0-100)')
@click.option('--sharpen/--no-sharpen', default=None, help='Edge-aware sharpening')
@click.option('--studio-lighting/--no-studio-lighting', default=None, help='Studio lighting vignette')
@click.option('--smart-tone/--no-smart-tone', default=None, help='Tone curve')
@click.option('--quality', type=click.IntRange(1, 100), help='Quality for lossy output formats')
@click.option('--save-params', type=click.Path(dir_okay=False), help='Write the used parameters as YAML')
@click.pass_context
def enhance(ctx, image: str, output: str, auto_enhance: bool, params_file: Optional[str],
            brightness: Optional[float], contrast: Optional[float],
            saturation: Optional[float], warmth: Optional[float],
            sharpen: Optional[bool], studio_lighting: Optional[bool],
            smart_tone: Optional[bool], quality: Optional[int],
            save_params: Optional[str]):
    """
    Enhance IMAGE and write the result to OUTPUT.

    Explicit options override automatic or file-based settings.
    """
    config = ctx.obj['config']
    quiet = ctx.obj.get('quiet', False)
    buffer = _load(image)

    if params_file:
        with open(params_file, 'r') as f:
            params = EnhancementParameters.from_dict(yaml.safe_load(f) or {})
    elif auto_enhance:
        stats = _analyzer(config).analyze(buffer)
        params = AutoEnhanceEstimator().estimate_parameters(stats)
    else:
        params = EnhancementParameters.identity()

    filters = params.filters
    params = params.replace(
        filters=FilterParameters(
            brightness=filters.brightness if brightness is None else brightness,
            contrast=filters.contrast if contrast is None else contrast,
            saturation=filters.saturation if saturation is None else saturation,
            warmth=filters.warmth if warmth is None else warmth,
        ),
        toggles=FeatureToggles(
            sharpen=params.toggles.sharpen if sharpen is None else sharpen,
            studio_lighting=params.toggles.studio_lighting if studio_lighting is None else studio_lighting,
            smart_tone=params.toggles.smart_tone if smart_tone is None else smart_tone,
        ),
    )

    result = FilterChain(config).run(buffer, params)
    quality = quality or get_config_value(config, 'output.quality', 95)
    save_image_file(result, output, quality=quality)

    if save_params:
        Path(save_params).write_text(
            yaml.safe_dump(params.to_dict(), default_flow_style=False, sort_keys=False)
        )

    if not quiet:
        click.echo(f"Enhanced {image} -> {output}")


if __name__ == '__main__':
    main()
