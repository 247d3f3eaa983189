"""CLI entry point for simtest."""
from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click

from simtest import __version__, configure_logging
from simtest.config import SuiteConfig, find_suite_file, load_suite
from simtest.core.errors import HarnessError, ToolNotFoundError
from simtest.core.models import CasePaths, ToolchainPaths
from simtest.core.runner import SuiteRunner, collect_cases, discover_categories
from simtest.generators import generate_all
from simtest.reporting import JsonReporter, ReportManager, Reporter, TerminalReporter
from simtest.toolchain import ImageBuilder, locate_toolchain


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class CliState:
    """Holds global CLI state and the lazily loaded suite configuration."""

    def __init__(
        self,
        verbose: bool,
        config_path: Optional[str] = None,
        simulator: Optional[str] = None,
        root: Optional[str] = None,
    ) -> None:
        self.verbose = verbose
        self.config_path = config_path
        self.simulator = simulator
        self.root = root
        self._suite: Optional[SuiteConfig] = None

    def suite(self) -> SuiteConfig:
        if self._suite is None:
            path = self.config_path or find_suite_file()
            suite = load_suite(str(path)) if path else SuiteConfig()
            if self.simulator:
                suite = replace(suite, simulator=Path(self.simulator).expanduser().resolve())
            if self.root:
                suite = replace(suite, root=Path(self.root).expanduser().resolve())
            self._suite = suite.resolved()
        return self._suite

    def toolchain(self) -> ToolchainPaths:
        suite = self.suite()
        return locate_toolchain(
            assembler=suite.toolchain.assembler,
            disassembler=suite.toolchain.disassembler,
        )


def _print_version(_: click.Context, __: click.Parameter, value: bool) -> None:
    if not value or click.get_current_context().resilient_parsing:
        return
    click.echo(f"simtest {__version__}")
    raise click.exceptions.Exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show the simtest version and exit.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Suite YAML file (defaults to ./simtest.yaml when present).",
)
@click.option("--simulator", type=str, help="Simulator executable (overrides suite file and SIMTEST_SIMULATOR).")
@click.option("--root", type=str, help="Testing root holding the category folders (overrides SIMTEST_ROOT).")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_path: Optional[str],
    simulator: Optional[str],
    root: Optional[str],
) -> None:
    """Build memory images, run the simulator and check its dumps."""

    configure_logging(verbose)
    ctx.obj = CliState(verbose=verbose, config_path=config_path, simulator=simulator, root=root)


@cli.command()
@click.pass_obj
def locate(state: CliState) -> None:
    """Print the assembler and disassembler that will be used."""

    toolchain = _resolve_toolchain(state)
    click.echo(f"assembler:    {toolchain.assembler}")
    click.echo(f"disassembler: {toolchain.disassembler}")


@cli.command()
@click.argument("name")
@click.option("--category", required=True, help="Category folder the test lives in.")
@click.pass_obj
def build(state: CliState, name: str, category: str) -> None:
    """Assemble one test and write its memory image."""

    suite = _load_suite(state)
    toolchain = _resolve_toolchain(state)
    paths = CasePaths.for_case(Path(suite.root or Path.cwd()), category, name)
    builder = ImageBuilder(
        toolchain,
        march=suite.toolchain.march,
        mabi=suite.toolchain.mabi,
        timeout=suite.timeout,
    )
    try:
        image = builder.build(
            paths.source,
            object_path=paths.object,
            disassembly_path=paths.disassembly,
            image_path=paths.memory_image,
        )
    except HarnessError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(str(image))


@cli.command()
@click.argument("categories", nargs=-1)
@click.pass_obj
def generate(state: CliState, categories: Tuple[str, ...]) -> None:
    """Regenerate pytest suites from the assembly sources of each category."""

    suite = _load_suite(state)
    root = Path(suite.root or Path.cwd())
    selected = _select_categories(suite, root, categories)
    try:
        generated = generate_all(root, selected, settings=suite.generator_settings())
    except HarnessError as exc:
        raise click.ClickException(str(exc)) from exc
    for category, names in generated.items():
        click.echo(f"{category}: {len(names)} test(s)")


@cli.command()
@click.argument("categories", nargs=-1)
@click.option("--cases", "case_filters", type=str, help="Comma-separated test name filters (supports globs).")
@click.option("--fail-fast", is_flag=True, help="Stop after the first failing case.")
@click.option("--keep", "keep_artifacts", is_flag=True, help="Keep generated files even for passing cases.")
@click.option("--list", "list_only", is_flag=True, help="List matched cases without running.")
@click.option(
    "--report",
    "report_format",
    type=click.Choice(["terminal", "json"]),
    default="terminal",
    show_default=True,
    help="Report format (terminal by default).",
)
@click.option("--report-path", type=str, help="When --report json, write to this path.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
@click.pass_obj
def run(
    state: CliState,
    categories: Tuple[str, ...],
    case_filters: Optional[str],
    fail_fast: bool,
    keep_artifacts: bool,
    list_only: bool,
    report_format: str,
    report_path: Optional[str],
    no_color: bool,
) -> None:
    """Run the regression cases found under the testing root."""

    suite = _load_suite(state)
    root = Path(suite.root or Path.cwd())
    selected = _select_categories(suite, root, categories)
    cases = collect_cases(suite, selected, patterns=_split_csv(case_filters))
    if list_only:
        for case in cases:
            click.echo(case.identifier())
        return
    if not cases:
        click.echo("No cases matched the provided filters.")
        raise click.exceptions.Exit(1)
    if suite.simulator is None:
        raise click.ClickException(
            "No simulator configured: pass --simulator, set 'simulator' in the suite file "
            "or export SIMTEST_SIMULATOR=/path/to/simulator"
        )
    runner = SuiteRunner(
        toolchain=_resolve_toolchain(state),
        fail_fast=fail_fast,
        keep_artifacts=keep_artifacts,
    )
    manager = ReportManager(_reporters(report_format, report_path, use_color=not no_color))
    manager.start(cases)
    try:
        results = runner.run(cases, on_result=manager.handle_result)
    except HarnessError as exc:
        raise click.ClickException(str(exc)) from exc
    manager.complete(results)
    exit_code = 0 if results and all(result.passed for result in results) else 1
    raise click.exceptions.Exit(exit_code)


def main(argv: Optional[List[str]] = None) -> int:
    """Program entry point for console_scripts shim."""

    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=argv, prog_name="simtest", standalone_mode=True)
    except click.ClickException as err:  # pragma: no cover - click handles display
        err.show()
        return err.exit_code
    except SystemExit as exc:  # click may raise exit code
        return int(exc.code or 0)
    return 0


def _load_suite(state: CliState) -> SuiteConfig:
    try:
        return state.suite()
    except HarnessError as exc:
        raise click.ClickException(str(exc)) from exc


def _resolve_toolchain(state: CliState) -> ToolchainPaths:
    _load_suite(state)
    try:
        return state.toolchain()
    except ToolNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc


def _select_categories(suite: SuiteConfig, root: Path, categories: Sequence[str]) -> List[str]:
    if categories:
        return list(categories)
    if suite.categories:
        return list(suite.categories)
    found = discover_categories(root)
    if not found:
        raise click.ClickException(f"No categories found under {root}")
    return found


def _reporters(report_format: str, report_path: Optional[str], *, use_color: bool) -> List[Reporter]:
    if report_format == "json":
        return [JsonReporter(report_path)]
    return [TerminalReporter(use_color=use_color)]


def _split_csv(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return tuple()
    parts = [part.strip() for part in value.split(",") if part.strip()]
    return tuple(parts)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
