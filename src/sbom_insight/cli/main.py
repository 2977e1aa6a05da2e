"""
Command line interface for SBOM Insight.

Provides a rich command-line interface with:
- Graph metrics and top critical components for an SBOM
- Blast-radius, path and path-to-root queries
- Configuration validation and template generation

Usage:
    sbom-insight analyze bom.json
    sbom-insight impact bom.json pkg:npm/lodash@4.17.20
    sbom-insight paths bom.json app lodash --max-hops 4
    sbom-insight generate --output analysis.yaml
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from sbom_insight import __version__
from sbom_insight.analytics.analyzer import AnalysisReport, SBOMGraphAnalyzer
from sbom_insight.analytics.graph_builder import GraphFilters
from sbom_insight.analytics.models import ComponentType, NodeNotFoundError, RiskLevel
from sbom_insight.config import AnalysisConfig, ConfigLoader, TypeFilter, load_analysis_config
from sbom_insight.config.loader import ConfigError

# Initialize Rich console
console = Console()

# Create Typer app
app = typer.Typer(
    name="sbom-insight",
    help="SBOM Insight - Dependency graph analytics for CycloneDX SBOMs",
    add_completion=False,
    rich_markup_mode="rich",
)

RISK_STYLES = {
    RiskLevel.HIGH: "bold red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
    RiskLevel.NONE: "dim",
}


# =============================================================================
# Utility Functions
# =============================================================================


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.WARNING

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            show_time=True,
            show_path=verbose,
            rich_tracebacks=True,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


def print_header() -> None:
    """Print the CLI header banner."""
    header = Text()
    header.append("SBOM Insight", style="bold blue")
    header.append(" v", style="dim")
    header.append(__version__, style="cyan")

    console.print(
        Panel(
            header,
            subtitle="Dependency Graph Analytics",
            border_style="blue",
        )
    )


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green][+][/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red][-][/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow][!][/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue][*][/blue] {message}")


def _load_config(config_path: Path | None) -> AnalysisConfig:
    if config_path is None:
        return AnalysisConfig()
    return load_analysis_config(config_path)


def _build_snapshot(
    sbom_file: Path, config: AnalysisConfig, filters: GraphFilters | None = None
) -> tuple[SBOMGraphAnalyzer, AnalysisReport]:
    analyzer = SBOMGraphAnalyzer(config)
    with console.status(f"[bold blue]Analyzing {sbom_file.name}..."):
        report = analyzer.analyze(sbom_file, filters)
    return analyzer, report


# =============================================================================
# Commands
# =============================================================================


@app.command()
def analyze(
    sbom_file: Path = typer.Argument(
        ...,
        help="Path to CycloneDX JSON SBOM",
        exists=True,
        readable=True,
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Analysis configuration YAML",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the full JSON report to this file",
    ),
    component_type: TypeFilter | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Keep only components of this type",
    ),
    search: str | None = typer.Option(
        None,
        "--search",
        "-s",
        help="Keep components whose name, version or description matches",
    ),
    min_criticality: float | None = typer.Option(
        None,
        "--min-criticality",
        min=0.0,
        max=1.0,
        help="Drop components below this criticality",
    ),
    max_depth: int | None = typer.Option(
        None,
        "--max-depth",
        min=0,
        help="Drop components deeper than this level",
    ),
    hide_orphans: bool = typer.Option(
        False,
        "--hide-orphans",
        help="Drop components without dependency edges",
    ),
    top: int = typer.Option(
        10,
        "--top",
        "-n",
        min=0,
        help="Number of critical components to list",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path to log file",
    ),
) -> None:
    """
    Analyze the dependency graph of an SBOM.

    Shows graph metrics, the most critical components and the critical
    path; optionally writes the full report as JSON.
    """
    print_header()
    setup_logging(verbose, log_file)

    try:
        config = _load_config(config_path)
        if config_path is not None and not verbose:
            logging.getLogger("sbom_insight").setLevel(config.log_level)

        overrides = {}
        if component_type is not None:
            overrides["component_type"] = component_type
        if search is not None:
            overrides["search"] = search
        if min_criticality is not None:
            overrides["min_criticality"] = min_criticality
        if max_depth is not None:
            overrides["max_depth"] = max_depth
        if hide_orphans:
            overrides["show_orphans"] = False
        filter_config = config.filters.model_copy(update=overrides)

        _, report = _build_snapshot(sbom_file, config, filter_config.to_filters())
    except ConfigError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1) from e
    except (FileNotFoundError, ValueError) as e:
        print_error(f"Analysis failed: {e}")
        raise typer.Exit(1) from e

    print_success(f"Analyzed {report.sbom_file} ({report.sbom_format})")
    _display_metrics(report)
    _display_critical_nodes(report, top)

    if report.critical_path:
        print_info("Critical path: " + " -> ".join(report.critical_path))

    if report.inventory:
        posture = report.inventory.posture
        print_info(
            f"Security score: {posture.score}/100 "
            f"({posture.with_hashes} hashed, {posture.licensed} licensed, "
            f"{posture.outdated} outdated of {posture.total})"
        )

    if output:
        output.write_text(report.to_json(), encoding="utf-8")
        print_success(f"JSON report saved to: {output}")


@app.command()
def impact(
    sbom_file: Path = typer.Argument(..., help="Path to CycloneDX JSON SBOM", exists=True),
    node_id: str = typer.Argument(..., help="Component id (bom-ref)"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Analysis configuration YAML"),
) -> None:
    """
    Show the blast radius of a component.

    Lists every component that transitively depends on it.
    """
    try:
        config = _load_config(config_path)
        analyzer, report = _build_snapshot(sbom_file, config)
        result = analyzer.impact(report.graph, node_id)
    except NodeNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(1) from e
    except (ConfigError, FileNotFoundError, ValueError) as e:
        print_error(f"Impact analysis failed: {e}")
        raise typer.Exit(1) from e

    print_success(
        f"{result.affected_count} of {report.graph.node_count} components affected "
        f"(impact score {result.impact_score:.2f})"
    )

    tree = Tree(f"[bold]{node_id}")
    for affected_id in result.affected[1:]:
        node = report.graph.node(affected_id)
        style = "bold red" if affected_id in result.critical_nodes else "white"
        tree.add(f"[{style}]{affected_id}[/{style}] [dim]({node.criticality_score:.2f})[/dim]")
    console.print(tree)

    if result.critical_nodes:
        print_warning(f"Critical components affected: {', '.join(result.critical_nodes)}")


@app.command()
def paths(
    sbom_file: Path = typer.Argument(..., help="Path to CycloneDX JSON SBOM", exists=True),
    from_id: str = typer.Argument(..., help="Start component id"),
    to_id: str = typer.Argument(..., help="End component id"),
    max_paths: int = typer.Option(3, "--max-paths", min=1, max=100, help="Maximum number of paths"),
    max_hops: int = typer.Option(5, "--max-hops", min=1, max=50, help="Maximum edges per path"),
) -> None:
    """
    List dependency paths between two components.
    """
    config = AnalysisConfig.model_validate(
        {"paths": {"max_paths": max_paths, "max_hops": max_hops}}
    )
    try:
        analyzer, report = _build_snapshot(sbom_file, config)
        found = analyzer.shortest_paths(report.graph, from_id, to_id)
    except NodeNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(1) from e
    except (FileNotFoundError, ValueError) as e:
        print_error(f"Path search failed: {e}")
        raise typer.Exit(1) from e

    if not found:
        print_warning(f"No path from {from_id} to {to_id} within {max_hops} hops")
        return

    for i, path in enumerate(found, 1):
        console.print(f"[cyan]{i}.[/cyan] " + " -> ".join(path))


@app.command("root-path")
def root_path(
    sbom_file: Path = typer.Argument(..., help="Path to CycloneDX JSON SBOM", exists=True),
    node_id: str = typer.Argument(..., help="Component id (bom-ref)"),
) -> None:
    """
    Show one chain of dependents from a component up to a root.
    """
    try:
        analyzer, report = _build_snapshot(sbom_file, AnalysisConfig())
        chain = analyzer.path_to_root(report.graph, node_id)
    except NodeNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(1) from e
    except (FileNotFoundError, ValueError) as e:
        print_error(f"Path search failed: {e}")
        raise typer.Exit(1) from e

    console.print(" <- ".join(chain))


@app.command()
def validate(
    config_path: Path = typer.Argument(
        ...,
        help="Path to configuration YAML file",
        exists=True,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed validation output",
    ),
) -> None:
    """
    Validate an analysis configuration file.
    """
    print_header()
    loader = ConfigLoader()

    try:
        with console.status("[bold blue]Validating configuration..."):
            config = loader.load_analysis(config_path)
    except ConfigError as e:
        print_error(f"Validation failed: {e}")
        raise typer.Exit(1) from e

    print_success(f"Configuration is valid: {config.name}")

    if verbose:
        table = Table(title="Configuration Details")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        for key, value in config.model_dump(mode="json").items():
            table.add_row(key, str(value))
        console.print(table)


@app.command()
def generate(
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path (default: stdout)",
    ),
) -> None:
    """
    Generate an analysis configuration template.
    """
    content = ConfigLoader.generate_analysis_template()

    if output:
        output.write_text(content, encoding="utf-8")
        print_success(f"Configuration template written to: {output}")
    else:
        console.print(Panel(content, title="Analysis Template"))


@app.command()
def info() -> None:
    """
    Display version, platform and the available analyses.
    """
    print_header()

    table = Table(title="System Information", show_header=True)
    table.add_column("Component", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Version", __version__)
    table.add_row("Python", sys.version.split()[0])
    table.add_row("Platform", sys.platform)
    table.add_row("Time", datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    table.add_row("Component types", ", ".join(t.value for t in ComponentType))

    console.print(table)

    tree = Tree("[bold blue]Available Analyses")

    node_metrics = tree.add("[cyan]Per component")
    node_metrics.add("Fan-in / fan-out")
    node_metrics.add("Topological depth")
    node_metrics.add("Risk level and criticality score")

    graph_metrics = tree.add("[cyan]Per graph")
    graph_metrics.add("Clusters and circular dependencies")
    graph_metrics.add("Density, centrality and modularity proxies")

    queries = tree.add("[cyan]Queries")
    queries.add("Impact (blast radius)")
    queries.add("Shortest paths and path to root")
    queries.add("Critical path")

    console.print(tree)


@app.command()
def version() -> None:
    """Display version information."""
    console.print(f"sbom-insight version [bold cyan]{__version__}[/bold cyan]")


# =============================================================================
# Helper Functions
# =============================================================================


def _display_metrics(report: AnalysisReport) -> None:
    """Display graph-level metrics."""
    metrics = report.metrics

    table = Table(title="Graph Metrics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Components", str(metrics.total_nodes))
    table.add_row("Dependencies", str(metrics.total_edges))
    table.add_row("Avg dependencies", f"{metrics.avg_dependencies:.2f}")
    table.add_row("Max depth", str(metrics.max_depth))
    table.add_row("Clusters", str(metrics.cluster_count))
    circular_style = "red" if metrics.circular_deps else "green"
    table.add_row("Circular dependencies", f"[{circular_style}]{metrics.circular_deps}[/{circular_style}]")
    table.add_row("Density", f"{metrics.network_density:.4f}")
    table.add_row("Centrality", f"{metrics.centrality_score:.2f}")
    table.add_row("Modularity", f"{metrics.modularity_score:.1f}")
    table.add_row("Elevated risk", str(report.vulnerable_nodes))

    console.print(table)


def _display_critical_nodes(report: AnalysisReport, limit: int) -> None:
    """Display the most critical components."""
    if limit == 0 or not report.graph.nodes:
        return

    table = Table(title="Most Critical Components", show_header=True)
    table.add_column("Component", style="yellow")
    table.add_column("Version")
    table.add_column("Type", style="cyan")
    table.add_column("Out", justify="right")
    table.add_column("In", justify="right")
    table.add_column("Depth", justify="right")
    table.add_column("Risk")
    table.add_column("Criticality", justify="right", style="green")

    for node in report.top_critical(limit):
        style = RISK_STYLES[node.risk_level]
        table.add_row(
            node.name,
            node.version or "-",
            node.type.value,
            str(node.dependency_count),
            str(node.dependent_count),
            str(node.depth),
            f"[{style}]{node.risk_level.value}[/{style}]",
            f"{node.criticality_score:.3f}",
        )

    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
