"""
CLI для ручного обслуживания базы знаний.

Usage:
    python -m dts_assistant.cli scrape            # полный обход и статистика
    python -m dts_assistant.cli update            # проверка свежести + нужное обновление
    python -m dts_assistant.cli health            # отчёт о состоянии (коды выхода 0/1/2/3)
    python -m dts_assistant.cli --help

update предназначен для запуска по расписанию (например, cron каждые 30 минут).
"""

import asyncio
from collections import Counter
from dataclasses import replace
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
import typer

from dts_assistant.config import KnowledgeBaseConfig, StorageConfig, get_kb_config
from dts_assistant.knowledge.errors import KnowledgeBaseError
from dts_assistant.knowledge.freshness import FreshnessDecision, FreshnessPolicy, RefreshAction
from dts_assistant.knowledge.health import HealthReport, HealthStatus, check_health
from dts_assistant.knowledge.models import KnowledgeBaseDocument
from dts_assistant.knowledge.store import KnowledgeBaseStore
from dts_assistant.knowledge.updater import KnowledgeBaseUpdater, UpdateResult
from dts_assistant.logging_config import get_logger
from dts_assistant.time_utils import format_age, format_duration, format_local

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name='dts-kb',
    help='🏔️ Обслуживание базы знаний DTS Gilgit-Baltistan',
    add_completion=False,
)

INTERNAL_ERROR_EXIT_CODE = 3

STATUS_STYLES = {
    HealthStatus.HEALTHY: '[bold green]✅ HEALTHY[/bold green]',
    HealthStatus.WARNING: '[bold yellow]⚠️ WARNING[/bold yellow]',
    HealthStatus.CRITICAL: '[bold red]❌ CRITICAL[/bold red]',
}


def run_async(coro):
    """Helper для запуска async функций."""
    return asyncio.run(coro)


def _load_config(kb_path: Optional[Path]) -> KnowledgeBaseConfig:
    config = get_kb_config()
    if kb_path is not None:
        config = replace(config, storage=StorageConfig(knowledge_base_path=kb_path))
    return config


def _policy(config: KnowledgeBaseConfig) -> FreshnessPolicy:
    return FreshnessPolicy(
        static_max_age=config.freshness.static_max_age,
        dynamic_max_age=config.freshness.dynamic_max_age,
    )


KB_PATH_OPTION = typer.Option(None, '--kb-path', help='Путь к JSON-файлу базы знаний')


# =============================================================================
# Вывод
# =============================================================================


def print_stats(document: KnowledgeBaseDocument, samples: int = 3) -> None:
    """Статистика документа: источники, категории, секции, примеры записей."""
    console.print(
        Panel(
            f'[bold]Sources:[/bold] {len(document.sources)}\n'
            f'[bold]Last updated:[/bold] {format_local(document.last_updated)}\n'
            f'[bold]FAQ entries:[/bold] {len(document.faq)}',
            title='📊 Knowledge base',
        )
    )

    categories = Counter(source.content.type.value for source in document.sources)
    table = Table(title='Categories')
    table.add_column('Category', style='cyan')
    table.add_column('Pages', justify='right')
    for category, count in sorted(categories.items()):
        table.add_row(category, str(count))
    console.print(table)

    sections = Counter(source.parent_section or source.section for source in document.sources)
    table = Table(title='Sections')
    table.add_column('Section', style='cyan')
    table.add_column('Pages', justify='right')
    for section, count in sections.items():
        table.add_row(section, str(count))
    console.print(table)

    for source in document.sources[:samples]:
        content = source.content
        console.rule(f'[bold]{source.title}[/bold]')
        console.print(f'[dim]URL:[/dim] {source.url}')
        console.print(f'[dim]Section:[/dim] {source.section}  [dim]Category:[/dim] {content.type.value}')
        console.print(
            f'[dim]Headings:[/dim] {len(content.headings)}  '
            f'[dim]Paragraphs:[/dim] {len(content.paragraphs)}  '
            f'[dim]Lists:[/dim] {len(content.structured_lists)}  '
            f'[dim]Tables:[/dim] {len(content.tables)}'
        )


def print_update(decision: FreshnessDecision, result: UpdateResult) -> None:
    console.print(f'[bold]Decision:[/bold] {decision.action.value} ({decision.reason})')

    if result.action == RefreshAction.NONE:
        console.print('[green]✅ Knowledge base is fresh, nothing to do[/green]')
        return

    if result.fell_back:
        console.print('[yellow]⚠️ Selective update failed, full update performed instead[/yellow]')

    if result.action == RefreshAction.SELECTIVE:
        console.print('[bold]Updated dynamic sections:[/bold]')
        for section in result.refreshed_sections:
            console.print(f'  • {section}')
    else:
        console.print(f'[bold]Full update:[/bold] {result.records_count} sections')

    if result.errors:
        console.print(f'[yellow]Failed pages: {len(result.errors)}[/yellow]')
        for error in result.errors:
            console.print(f'  • {error["section"]}: {error["error"]}')


def print_health(report: HealthReport) -> None:
    console.rule('📋 KNOWLEDGE BASE HEALTH REPORT')
    console.print(f'Status: {STATUS_STYLES[report.status]}')

    if report.last_updated is not None and report.time_since_update is not None:
        console.print(f'Last Updated: {format_local(report.last_updated)} ({format_age(report.last_updated)})')
        console.print(f'Time Since Update: {format_duration(report.time_since_update.total_seconds())} ago')
        console.print(f'Total Sources: {report.total_sources}')

    if report.missing_sections:
        console.print(f'\n[red]❌ Missing Sections ({len(report.missing_sections)}):[/red]')
        for section in report.missing_sections:
            console.print(f'  • {section}')

    if report.stale_sections:
        console.print(f'\n[yellow]⚠️ Stale Dynamic Sections ({len(report.stale_sections)}):[/yellow]')
        for section in report.stale_sections:
            console.print(f'  • {section}')

    if report.recommendations:
        console.print('\n💡 Recommendations:')
        for recommendation in report.recommendations:
            console.print(f'  • {recommendation}')

    console.rule()


# =============================================================================
# Команды
# =============================================================================


@app.command('scrape')
def scrape_cmd(
    kb_path: Optional[Path] = KB_PATH_OPTION,
    samples: int = typer.Option(3, '--samples', '-s', help='Сколько записей показать'),
):
    """Полный обход сайта с заменой базы знаний."""
    config = _load_config(kb_path)
    updater = KnowledgeBaseUpdater.from_config(config)

    console.print(f'🚀 Full crawl of {config.site.base_url}')
    try:
        result = run_async(updater.full_update())
    except KnowledgeBaseError as e:
        console.print(f'[bold red]❌ Scraping failed:[/bold red] {e.message}')
        raise typer.Exit(code=1) from e

    if result.document is not None:
        print_stats(result.document, samples=samples)
    console.print(f'[green]✅ Saved to {config.storage.knowledge_base_path}[/green]')


@app.command('update')
def update_cmd(
    kb_path: Optional[Path] = KB_PATH_OPTION,
    force: bool = typer.Option(False, '--force', '-f', help='Всегда выполнять полный обход'),
):
    """Проверка свежести и нужное обновление (для запуска по расписанию)."""
    config = _load_config(kb_path)
    updater = KnowledgeBaseUpdater.from_config(config)

    if force:
        decision = FreshnessDecision(RefreshAction.FULL, reason='forced from command line')
    else:
        decision = _policy(config).decide(updater.store.load())

    try:
        result = run_async(updater.run(decision))
    except KnowledgeBaseError as e:
        logger.error('scheduled_update_failed', error=e.message)
        console.print(f'[bold red]❌ Update failed:[/bold red] {e.message}')
        raise typer.Exit(code=1) from e

    print_update(decision, result)


@app.command('health')
def health_cmd(
    kb_path: Optional[Path] = KB_PATH_OPTION,
):
    """Отчёт о состоянии базы знаний (0 - healthy, 1 - warning, 2 - critical, 3 - ошибка)."""
    try:
        config = _load_config(kb_path)
        report = check_health(
            KnowledgeBaseStore(config.storage.knowledge_base_path),
            freshness=config.freshness,
            policy=_policy(config),
        )
        print_health(report)
    except Exception as e:
        logger.error('health_check_error', error=str(e), exc_info=True)
        console.print(f'[bold red]❌ Health check failed:[/bold red] {e}')
        raise typer.Exit(code=INTERNAL_ERROR_EXIT_CODE) from e

    raise typer.Exit(code=report.exit_code)


if __name__ == '__main__':
    app()
