"""CLI check and diff command implementations.

This module implements ``schemacheck check``, which compares two schema
documents, classifies each change using recorded field usage and exits
non-zero when the change is unsafe, and ``schemacheck diff``, which lists the
raw structural changes without consulting usage data.
"""

import asyncio
from datetime import timedelta
import json
from pathlib import Path
import sys
import traceback
from typing import Any

from rich.console import Console
from rich.table import Table
import rich_click as click
import yaml

from ..core import (
    FileSchemaLoader,
    InvalidSchemaError,
    SchemaLoadError,
    build_schema,
    configure_logging,
)
from ..core.config import Settings
from ..diff import ChangeEvent, SchemaDiffer
from ..usage import UsageConfig, UsageConfigurationError, UsageDataError, create_usage_oracle
from ..validation import CheckPolicy, SchemaChangeValidator, Severity, ValidationResult

console = Console()

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_INPUT_ERROR = 2
EXIT_INTERNAL_ERROR = 4

SEVERITY_STYLES = {
    Severity.NOTICE: "cyan",
    Severity.WARNING: "yellow",
    Severity.FAILURE: "bold red",
}

SEVERITY_ICONS = {
    Severity.NOTICE: "ℹ️ ",
    Severity.WARNING: "⚠️ ",
    Severity.FAILURE: "❌",
}


def _should_use_rich_formatting(force_colors: bool = False) -> bool:
    """Determine if we should use rich formatting based on environment."""
    return force_colors or console.is_terminal


def _emit_error(output_format: str, error_type: str, message: str, **extra: Any) -> None:
    if output_format == "json":
        payload = {"status": "error", "error_type": error_type, "message": message, **extra}
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(f"❌ {message}")


def _output_table_format(
    result: ValidationResult,
    policy: CheckPolicy,
    old_path: str,
    new_path: str,
    verbose: bool,
    force_colors: bool = False,
) -> None:
    """Output check result as a table."""
    passed = policy.passed(result)
    escalated = policy.escalates(result) and result.warning_count > 0

    if _should_use_rich_formatting(force_colors):
        if passed:
            console.print("✅ [bold green]Schema check passed[/bold green]")
        else:
            console.print("❌ [bold red]Schema check failed[/bold red]")
        console.print()

        info_table = Table(show_header=False, box=None, padding=(0, 1))
        info_table.add_row("[bold]Old schema:[/bold]", f"[cyan]{old_path}[/cyan]")
        info_table.add_row("[bold]New schema:[/bold]", f"[cyan]{new_path}[/cyan]")
        info_table.add_row(
            "[bold]Changes:[/bold]",
            f"[red]{result.failure_count} failures[/red], "
            f"[yellow]{result.warning_count} warnings[/yellow], "
            f"[cyan]{result.notice_count} notices[/cyan]",
        )
        info_table.add_row(
            "[bold]Usage data:[/bold]",
            "[green]available[/green]"
            if result.usage_data_available
            else "[yellow]unavailable[/yellow]",
        )
        console.print(info_table)

        if result.changes:
            console.print()
            changes_table = Table(show_header=True, header_style="bold")
            changes_table.add_column("Severity")
            changes_table.add_column("Change")
            changes_table.add_column("Path")
            changes_table.add_column("Description")
            for change in result.changes:
                style = SEVERITY_STYLES[change.severity]
                changes_table.add_row(
                    f"[{style}]{change.severity.value}[/{style}]",
                    change.code,
                    f"[bold]{change.path}[/bold]",
                    change.event.description,
                )
            console.print(changes_table)

        if escalated:
            console.print()
            console.print(
                "💡 [italic yellow]No usage data was available for this comparison, "
                "so warnings are treated as failures.[/italic yellow]"
            )

        for problem in result.schema_errors if verbose else ():
            console.print(f"  [dim]• {problem}[/dim]")
        return

    # Plain text for non-interactive (CI)
    click.echo("✅ Schema check passed" if passed else "❌ Schema check failed")
    click.echo()
    click.echo(f"Old schema: {old_path}")
    click.echo(f"New schema: {new_path}")
    click.echo(
        f"Changes: {result.failure_count} failures, {result.warning_count} warnings, "
        f"{result.notice_count} notices"
    )
    click.echo(
        f"Usage data: {'available' if result.usage_data_available else 'unavailable'}"
    )

    if result.changes:
        click.echo()
        for change in result.changes:
            click.echo(
                f"{SEVERITY_ICONS[change.severity]} {change.severity.value:<8} "
                f"{change.code:<26} {change.path}"
            )
            click.echo(f"   {change.event.description}")

    if escalated:
        click.echo()
        click.echo(
            "💡 No usage data was available for this comparison, "
            "so warnings are treated as failures."
        )

    if verbose:
        for problem in result.schema_errors:
            click.echo(f"   - {problem}")


def _output_compact_format(
    result: ValidationResult,
    policy: CheckPolicy,
    old_path: str,
    new_path: str,
) -> None:
    """Output check result in compact, one-line-per-change format."""
    status = "✅ PASSED" if policy.passed(result) else "❌ FAILED"
    parts = [
        status,
        f"old={old_path}",
        f"new={new_path}",
        f"failures={result.failure_count}",
        f"warnings={result.warning_count}",
        f"notices={result.notice_count}",
        f"usage_data={'yes' if result.usage_data_available else 'no'}",
    ]
    click.echo(" ".join(parts))
    for change in result.changes:
        click.echo(f"  {change.severity.value} {change.code} {change.path}")


def _result_payload(
    result: ValidationResult, policy: CheckPolicy, old_path: str, new_path: str
) -> dict[str, Any]:
    return {
        "status": "passed" if policy.passed(result) else "failed",
        "old_schema": old_path,
        "new_schema": new_path,
        "warnings_escalated": policy.escalates(result) and result.warning_count > 0,
        **result.to_dict(),
    }


def _output_json_format(
    result: ValidationResult, policy: CheckPolicy, old_path: str, new_path: str
) -> None:
    """Output check result in JSON format."""
    click.echo(json.dumps(_result_payload(result, policy, old_path, new_path), indent=2))


def _output_yaml_format(
    result: ValidationResult, policy: CheckPolicy, old_path: str, new_path: str
) -> None:
    """Output check result in YAML format."""
    click.echo(
        yaml.dump(
            _result_payload(result, policy, old_path, new_path),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    )


def _load_documents(old: str, new: str) -> tuple[dict[str, Any], dict[str, Any]]:
    old_document = FileSchemaLoader(old).load_document()
    new_document = FileSchemaLoader(new).load_document()
    return old_document, new_document


async def _run_check(
    validator: SchemaChangeValidator,
    old_document: dict[str, Any],
    new_document: dict[str, Any],
) -> tuple[ValidationResult, bool]:
    result = await validator.check(old_document, new_document)
    return result, await validator.oracle_has_data()


def _check_implementation(  # noqa: PLR0913
    old: str,
    new: str,
    usage: str | None,
    tag: str | None,
    window_days: int | None,
    output_format: str,
    strict: bool,
    fail_warnings_without_usage: bool | None,
    verbose: bool,
    force_colors: bool,
) -> None:
    settings = Settings()
    configure_logging(
        environment=settings.environment,
        log_level="DEBUG" if verbose else settings.log_level,
        json_logs=settings.json_logs,
    )

    try:
        try:
            old_document, new_document = _load_documents(old, new)
        except SchemaLoadError as e:
            _emit_error(output_format, "schema_load_error", str(e))
            sys.exit(EXIT_INPUT_ERROR)

        usage_config = (
            UsageConfig(backend_type="file", path=usage, tag=tag or settings.usage_tag)
            if usage
            else settings.usage.model_copy(update={"tag": tag or settings.usage_tag})
        )
        try:
            oracle = create_usage_oracle(usage_config)
        except (UsageDataError, UsageConfigurationError) as e:
            _emit_error(output_format, "usage_data_error", str(e))
            sys.exit(EXIT_INPUT_ERROR)

        validator = SchemaChangeValidator(
            oracle,
            window=timedelta(days=window_days or settings.usage_window_days),
            timeout_seconds=settings.oracle_timeout_seconds,
            max_concurrency=settings.max_concurrent_queries,
        )
        result, oracle_has_data = asyncio.run(
            _run_check(validator, old_document, new_document)
        )

        policy = CheckPolicy(
            fail_warnings_without_usage=(
                settings.fail_warnings_without_usage
                if fail_warnings_without_usage is None
                else fail_warnings_without_usage
            ),
            strict=strict,
            oracle_has_data=oracle_has_data,
        )

        if output_format == "table":
            _output_table_format(result, policy, old, new, verbose, force_colors)
        elif output_format == "compact":
            _output_compact_format(result, policy, old, new)
        elif output_format == "json":
            _output_json_format(result, policy, old, new)
        elif output_format == "yaml":
            _output_yaml_format(result, policy, old, new)

        sys.exit(EXIT_PASSED if policy.passed(result) else EXIT_FAILED)

    except KeyboardInterrupt:
        _emit_error(output_format, "interrupted", "Schema check interrupted")
        sys.exit(EXIT_INTERNAL_ERROR)
    except Exception as e:
        _emit_error(output_format, "internal_error", f"Internal error: {e}")
        if verbose and output_format != "json":
            click.echo("\nFull traceback:")
            click.echo(traceback.format_exc())
        sys.exit(EXIT_INTERNAL_ERROR)


@click.command("check")
@click.argument("old", type=click.Path(exists=False, dir_okay=False))
@click.argument("new", type=click.Path(exists=False, dir_okay=False))
@click.option(
    "--usage",
    "-u",
    type=click.Path(exists=False, dir_okay=False),
    help="📈 **Usage records file** (YAML or JSON) to classify removals against",
    metavar="FILE",
)
@click.option(
    "--tag",
    type=str,
    help="🏷️  **Schema tag** - only consider usage recorded against this tag",
)
@click.option(
    "--window-days",
    type=click.IntRange(min=1),
    help="🗓️  **Usage window** in days (default from SCHEMACHECK_USAGE_WINDOW_DAYS or 30)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "compact", "json", "yaml"]),
    default="table",
    help="📋 **Output format** for check results",
    show_default=True,
)
@click.option(
    "--strict",
    is_flag=True,
    help="⚡ **Enable strict mode** - warnings become failures",
)
@click.option(
    "--fail-warnings-without-usage/--allow-warnings-without-usage",
    default=None,
    help="🚦 Whether warnings fail the check when no usage data is available",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="🔍 **Show detailed information** and debug logging",
)
@click.option(
    "--force-colors",
    is_flag=True,
    help="🎨 **Force colored output**",
    hidden=True,
)
def check_command(  # noqa: PLR0913
    old: str,
    new: str,
    usage: str | None,
    tag: str | None,
    window_days: int | None,
    output_format: str,
    strict: bool,
    fail_warnings_without_usage: bool | None,
    verbose: bool,
    force_colors: bool,
) -> None:
    """🔍 **Check a schema change** against recorded field usage.

    Compares OLD and NEW schema documents (native YAML/JSON layout or an
    introspection result), classifies every change as NOTICE, WARNING or
    FAILURE, and fails when a change would break existing consumers.

    **Examples:**

    ```bash
    schemacheck check old.yaml new.yaml                      # No usage data
    schemacheck check old.json new.json -u usage.yaml        # Usage-aware
    schemacheck check old.yaml new.yaml --format json        # JSON output
    schemacheck check old.yaml new.yaml --strict             # Warnings fail
    ```

    **Exit Codes:**
    - `0`: Check passed ✅
    - `1`: Check failed ❌
    - `2`: Schema or usage file missing, unreadable or unparseable 📁
    - `4`: Internal error 💥
    """
    _check_implementation(
        old,
        new,
        usage,
        tag,
        window_days,
        output_format,
        strict,
        fail_warnings_without_usage,
        verbose,
        force_colors,
    )


def _output_events(events: list[ChangeEvent], output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps([event.to_dict() for event in events], indent=2))
        return

    if not events:
        click.echo("✅ No changes")
        return

    if _should_use_rich_formatting():
        table = Table(show_header=True, header_style="bold")
        table.add_column("Category")
        table.add_column("Change")
        table.add_column("Path")
        table.add_column("Description")
        for event in events:
            table.add_row(event.category.value, event.code.value, event.path, event.description)
        console.print(table)
    else:
        for event in events:
            click.echo(f"{event.category.value:<9} {event.code.value:<26} {event.path}")


@click.command("diff")
@click.argument("old", type=click.Path(exists=False, dir_okay=False))
@click.argument("new", type=click.Path(exists=False, dir_okay=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="📋 **Output format** for the change list",
    show_default=True,
)
def diff_command(old: str, new: str, output_format: str) -> None:
    """🔀 **List structural changes** between two schema documents.

    Prints every change event in traversal order without consulting usage
    data or assigning severities.
    """
    try:
        old_document, new_document = _load_documents(old, new)
        old_model = build_schema(old_document)
        new_model = build_schema(new_document)
    except SchemaLoadError as e:
        _emit_error(output_format, "schema_load_error", str(e))
        sys.exit(EXIT_INPUT_ERROR)
    except InvalidSchemaError as e:
        _emit_error(
            output_format,
            "invalid_schema",
            f"Invalid schema: {e}",
            problems=e.errors,
        )
        if output_format != "json":
            for problem in e.errors:
                click.echo(f"   - {problem}")
        sys.exit(EXIT_FAILED)

    _output_events(SchemaDiffer().diff(old_model, new_model), output_format)


__all__ = ["check_command", "diff_command"]
