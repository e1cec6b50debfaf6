"""Command-line interface for DiffAgent."""

import json
import sys

import click

from diffagent import __version__
from diffagent.config import settings
from diffagent.agents.diff_agent import DiffAgent
from diffagent.observability.logging import setup_logging
from diffagent.report.formatter import format_report_markdown


@click.group()
@click.version_option(version=__version__, prog_name="diffagent")
def main():
    """DiffAgent - classify and risk-score unified diffs."""
    pass


@main.command()
@click.argument("diff_file", default="-", type=click.File("r", encoding="utf-8", errors="replace"))
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice(["json", "markdown"]),
    default="json",
    show_default=True,
    help="Report format written to stdout.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL for this run.",
)
@click.option("--show-metrics", is_flag=True, help="Print pipeline metrics to stderr.")
def analyze(diff_file, output_format: str, log_level, show_metrics: bool):
    """Analyze a unified diff read from DIFF_FILE, or stdin when omitted or '-'."""
    run_settings = settings
    if log_level:
        run_settings = settings.model_copy(update={"LOG_LEVEL": log_level.upper()})
    setup_logging(run_settings)

    agent = DiffAgent(settings=run_settings)
    report = agent.analyze(diff_file.read())

    if output_format == "markdown":
        click.echo(format_report_markdown(report))
    else:
        click.echo(json.dumps(report.to_dict(), indent=2))

    if show_metrics:
        click.echo(json.dumps(report.metrics, indent=2), err=True)

    if not report.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
