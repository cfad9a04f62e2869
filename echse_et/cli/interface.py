"""
ECHSE evapotranspiration CLI Interface

Command-line interface for parameter estimation and run-and-compare
post-processing.
"""

import json
from pathlib import Path

import click

from echse_et import __version__
from echse_et.config.settings import LOGGING, load_config
from echse_et.estimation import EstimationConfig, FcorrResult, ParameterEstimator
from echse_et.io.timeseries_reader import sources_from_config
from echse_et.postprocess import (
    CompareConfig,
    CompareVariable,
    FrameObservationProvider,
    RunAndCompare,
)
from echse_et.utils.exceptions import ECHSEError
from echse_et.utils.logger import Logger


# ============================================================================
# Utility Functions
# ============================================================================

def config_section(cfg: dict, name: str) -> dict:
    """Return a named section of the configuration, empty when absent."""
    section = cfg.get(name) or {}
    if not isinstance(section, dict):
        raise click.ClickException(f"Configuration section '{name}' must be a mapping")
    return section


def format_estimate(result) -> str:
    """Render an estimate as ``name = value`` lines, fcorr as a table."""
    if isinstance(result, FcorrResult):
        return result.to_frame().to_string(index=False)
    return "\n".join(f"{name} = {value:.6g}" for name, value in result.as_dict().items())


# ============================================================================
# Main Command Group
# ============================================================================

@click.group()
@click.option('--verbose', '-v', is_flag=True, default=False, help='Enable verbose logging')
@click.option('--log-file', type=click.Path(path_type=Path), help='Custom log file path')
@click.version_option(version=__version__, prog_name='ECHSE ET tools')
@click.pass_context
def cli(ctx, verbose, log_file):
    """
    ECHSE ET tools - parameter estimation and engine evaluation.

    \b
    Common commands:
      echse-et estimate   Estimate a parameter group from observations
      echse-et compare    Run an engine and compare it with observations

    For help on a specific command, run: echse-et COMMAND --help
    """
    ctx.ensure_object(dict)

    Logger.setup(log_file=str(log_file) if log_file else None, level=LOGGING['verbose_level'] if verbose else LOGGING['level'])
    if verbose:
        Logger.debug('Verbose logging enabled')

    ctx.obj['verbose'] = verbose
    ctx.obj['log_file'] = log_file


# ============================================================================
# Estimate Command
# ============================================================================

@cli.command()
@click.argument('parname')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, path_type=Path), required=True,
              help='Configuration file with sources and estimation settings (YAML or JSON)')
@click.option('--no-plots', is_flag=True, default=False, help='Do not write diagnostic figures')
@click.option('--json', 'output_json', is_flag=True, default=False, help='Print the estimate as JSON')
@click.pass_context
def estimate(ctx, parname, config_path, no_plots, output_json):
    """
    Estimate the parameter group PARNAME belongs to.

    \b
    Examples:
      echse-et estimate alb -c site.yaml
      echse-et estimate radex_a -c site.yaml --no-plots
      echse-et estimate fcorr -c site.yaml --json

    PARNAME selects the first family whose tag it contains: alb, radex, fcorr, emis, f.
    Relative source paths are resolved against the configuration file.
    """
    try:
        cfg = load_config(config_path)
        sources = sources_from_config(config_section(cfg, 'sources'), base_dir=config_path.parent)
        settings = EstimationConfig.from_dict(config_section(cfg, 'estimation'))
        if no_plots:
            settings.plots = False

        result = ParameterEstimator(sources, settings).estimate(parname)
    except ECHSEError as e:
        raise click.ClickException(str(e))

    if output_json:
        click.echo(json.dumps(result.as_dict(), indent=2))
    else:
        click.echo(format_estimate(result))


# ============================================================================
# Compare Command
# ============================================================================

@cli.command()
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, path_type=Path), required=True,
              help='Configuration file with compare settings and observations (YAML or JSON)')
@click.option('--variable', type=click.Choice([v.value for v in CompareVariable], case_sensitive=False),
              required=True, help='Quantity to compare')
@click.option('--no-plots', is_flag=True, default=False, help='Do not write comparison figures')
@click.option('--skip-run', is_flag=True, default=False, help='Read the existing engine output without running')
@click.pass_context
def compare(ctx, config_path, variable, no_plots, skip_run):
    """
    Run an ECHSE engine and compare its result with observations.

    \b
    Examples:
      echse-et compare -c portugal.yaml --variable evap
      echse-et compare -c morocco.yaml --variable glorad --no-plots

    The configuration holds a 'compare' section (engine, start, end, site,
    ...) and an 'observations' section mapping channels to files.
    """
    try:
        cfg = load_config(config_path)
        settings = CompareConfig.from_dict(config_section(cfg, 'compare'))
        if no_plots:
            settings.plots = False

        sources = sources_from_config(config_section(cfg, 'observations'), base_dir=config_path.parent)
        provider = FrameObservationProvider.from_sources(sources, site=settings.site)

        result = RunAndCompare.from_config(settings, provider).run(variable, execute=not skip_run)
    except ECHSEError as e:
        raise click.ClickException(str(e))

    click.echo(f'result_mean = {result.result_mean:.6g}')
    if not result.compared:
        click.echo(f'No {result.variable.value} observations for region {result.region}')
        return

    if len(result.simulated_cumsum):
        click.echo(f'simulated_total = {result.simulated_cumsum.iloc[-1]:.6g}')
    if len(result.observed_cumsum):
        click.echo(f'observed_total = {result.observed_cumsum.iloc[-1]:.6g}')
    for path in result.plot_paths:
        click.echo(f'  [OK] {path}')


if __name__ == '__main__':
    cli()
