"""
Command-line interface for the AST feature graph extractor.

Provides commands for extracting feature graphs from Java sources
and inspecting stored graphs.
"""

import json
import sys
from pathlib import Path

import click

from astfeatures import __version__
from astfeatures.core.config import Config
from astfeatures.core.exceptions import AstFeaturesError
from astfeatures.utils.logging_config import setup_logging
from astfeatures.utils.validation import validate_directory, validate_file


def _fail(ctx, error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get("verbose"):
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Path to log file"
)
@click.option(
    "--config", "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file created with 'astf init'"
)
@click.pass_context
def cli(ctx, verbose, log_file, config_file):
    """
    AST Feature Graph Extractor

    Convert Java sources into feature graphs of syntax nodes and
    child-group holder nodes.
    """
    ctx.ensure_object(dict)

    if config_file:
        config = Config.load_from_file(config_file)
    else:
        config = Config.load_from_env()

    verbose = verbose or config.verbose
    log_file = log_file or config.log_file
    ctx.obj["verbose"] = verbose

    log_level = "DEBUG" if verbose else "INFO"
    setup_logging(level=log_level, log_file=Path(log_file) if log_file else None)


@cli.command()
@click.argument("file")
@click.option(
    "--output", "-o",
    type=click.Path(),
    help="Where to save the graph (printed as JSON when omitted)"
)
@click.option(
    "--compress",
    is_flag=True,
    help="Write gzip-compressed JSON"
)
@click.pass_context
def extract(ctx, file, output, compress):
    """
    Extract the feature graph of a single source file.

    Examples:

        astf extract Foo.java

        astf extract Foo.java -o foo.json --compress
    """
    is_valid, error = validate_file(file)
    if not is_valid:
        click.echo(f"Error: {error}", err=True)
        sys.exit(1)

    from astfeatures.engine import FeatureExtractor

    try:
        graph = FeatureExtractor(Config.get()).extract_file(Path(file))
    except AstFeaturesError as e:
        _fail(ctx, e)

    if not output:
        click.echo(json.dumps(graph.to_dict(), indent=2))
        return

    try:
        saved = graph.save(Path(output), compress=compress or None)
    except OSError as e:
        _fail(ctx, e)

    click.echo(f"Nodes: {graph.node_count}, edges: {graph.edge_count}")
    click.echo(f"Graph saved to: {saved}")


@cli.command()
@click.argument("directory")
@click.option(
    "--output-dir", "-o",
    type=click.Path(file_okay=False),
    help="Directory for extracted graphs (defaults to the configured output directory)"
)
@click.option(
    "--compress",
    is_flag=True,
    help="Write gzip-compressed JSON"
)
@click.pass_context
def batch(ctx, directory, output_dir, compress):
    """
    Extract feature graphs for every source file under a directory.

    Files that fail to compile are reported and skipped.
    """
    is_valid, error = validate_directory(directory)
    if not is_valid:
        click.echo(f"Error: {error}", err=True)
        sys.exit(1)

    config = Config.get()
    if compress:
        config.storage.enable_compression = True

    from astfeatures.engine import FeatureExtractor

    try:
        summary = FeatureExtractor(config).extract_directory(
            Path(directory),
            Path(output_dir) if output_dir else None,
        )
    except AstFeaturesError as e:
        _fail(ctx, e)

    click.echo("=" * 60)
    click.echo("EXTRACTION COMPLETE")
    click.echo("=" * 60)
    click.echo(f"Succeeded: {summary.succeeded}")
    click.echo(f"Failed:    {summary.failed}")
    click.echo(f"Skipped:   {len(summary.skipped)}")
    click.echo(f"Nodes:     {summary.total_nodes}")
    click.echo(f"Edges:     {summary.total_edges}")
    click.echo(f"Output:    {summary.output_dir}")
    click.echo("=" * 60)

    for name, reason in summary.failures.items():
        click.echo(f"  {name}: {reason}", err=True)

    if summary.failed:
        sys.exit(1)


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--top",
    type=int,
    default=10,
    help="Number of most frequent node labels to show"
)
@click.pass_context
def stats(ctx, graph_file, top):
    """Show statistics for a stored graph."""
    from astfeatures.graph.feature_graph import FeatureGraph

    try:
        graph = FeatureGraph.load(Path(graph_file))
    except AstFeaturesError as e:
        _fail(ctx, e)

    statistics = graph.get_statistics()
    distribution = statistics["type_distribution"]

    click.echo("Graph Statistics:")
    click.echo("-" * 40)
    click.echo(f"  Source file: {graph.source_file}")
    click.echo(f"  Root: {graph.root.contents if graph.root else '-'}")
    click.echo(f"  Nodes: {statistics['node_count']}")
    click.echo(f"  Edges: {statistics['edge_count']}")
    click.echo(f"  Depth: {statistics['depth']}")
    for node_type, count in sorted(distribution["types"].items()):
        click.echo(f"  {node_type}: {count}")

    labels = sorted(distribution["contents"].items(), key=lambda item: (-item[1], item[0]))
    if labels:
        click.echo("Most frequent labels:")
        for label, count in labels[:top]:
            click.echo(f"  {label}: {count}")


@cli.command()
@click.option(
    "--output", "-o",
    type=click.Path(),
    default="config.json",
    help="Output path for configuration file"
)
def init(output):
    """
    Initialize configuration file.

    Creates a default configuration file that can be customized.
    """
    Config.save_to_file(output)
    click.echo(f"Configuration saved to: {output}")


@cli.command()
def list_languages():
    """List supported programming languages."""
    from astfeatures.frontend import FrontendRegistry

    click.echo("Supported Languages:")
    click.echo("-" * 40)
    for language in sorted(FrontendRegistry.list_languages()):
        frontend = FrontendRegistry.get_frontend(language)
        click.echo(f"  {language}: {', '.join(frontend.SUPPORTED_EXTENSIONS)}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
