# === FILE: sourcemap_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска SourceMapScout через командную строку.

Команды:
  audit SNAPSHOT  Проверить сохранённый снимок артефактов (JSON/YAML)
  collect URL     Собрать снимок ScriptElements/SourceMaps страницы
  scan URL        Собрать снимок и сразу проверить его
  config          Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (значения по умолчанию, если не указан)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Опции audit / scan:
  --json PATH         Сохранить JSON-отчёт в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с Jinja2-шаблонами
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --strict            Код выхода 2, если проверка провалена

Дополнительно:
  --version, -v       Показать версию SourceMapScout

Пример:
  sourcemap-scout scan https://example.com --html report.html
"""
import json
import sys
from pathlib import Path

import click

from sourcemap_scout import __version__
from sourcemap_scout.artifacts import artifacts_to_dict, dump_artifacts
from sourcemap_scout.config import AuditConfig, load_config
from sourcemap_scout.engine import Engine
from sourcemap_scout.logger import init_logging
from sourcemap_scout.report import DEFAULT_TEMPLATE_DIR
from sourcemap_scout.report.html_report import render_html
from sourcemap_scout.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
STRICT_FAILURE_EXIT_CODE = 2


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def report_options(func):
    """Общие опции вывода для команд audit и scan."""
    func = click.option(
        '--strict', is_flag=True,
        help='Код выхода 2, если проверка провалена'
    )(func)
    func = click.option(
        '--pretty', is_flag=True,
        help='Преформатировать JSON-вывод (отступ 2)'
    )(func)
    func = click.option(
        '--template', '-t', 'template_dir',
        default=DEFAULT_TEMPLATE_DIR,
        show_default=True,
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        help='Папка с Jinja2-шаблонами'
    )(func)
    func = click.option(
        '--html', '-h', 'html_output',
        default=None,
        type=click.Path(writable=True, dir_okay=False, path_type=Path),
        help='Сохранить HTML-отчёт в файл'
    )(func)
    func = click.option(
        '--json', '-j', 'json_output',
        default=None,
        type=click.Path(writable=True, dir_okay=False, path_type=Path),
        help='Сохранить JSON-отчёт в файл'
    )(func)
    return func


def emit_report(verdict, json_output, html_output, template_dir, pretty, strict):
    """Печатает или сохраняет отчёт и завершает команду с нужным кодом."""
    if not json_output and not html_output:
        click.echo(verdict.json(pretty=pretty))
    if json_output:
        try:
            saved_json = render_json(verdict, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')
    if html_output:
        try:
            saved_html = render_html(verdict, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')
    if strict and not verdict.passed:
        sys.exit(STRICT_FAILURE_EXIT_CODE)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SourceMapScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SourceMapScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    cfg = AuditConfig()
    if config_path is not None:
        try:
            cfg = load_config(config_path)
        except Exception as e:
            print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('audit', context_settings=CONTEXT_SETTINGS)
@click.argument('snapshot', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@report_options
@click.pass_context
def audit(ctx, snapshot, json_output, html_output, template_dir, pretty, strict):
    """Проверить сохранённый снимок артефактов."""
    engine = Engine(ctx.obj['config'])
    try:
        verdict = engine.audit_snapshot(snapshot)
    except Exception as e:
        print_error(f'Ошибка загрузки снимка: {e}')
    emit_report(verdict, json_output, html_output, template_dir, pretty, strict)


@cli.command('collect', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option(
    '--output', '-o', 'output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить снимок в JSON-файл'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.pass_context
def collect(ctx, url, output, pretty):
    """Собрать ScriptElements и SourceMaps страницы."""
    engine = Engine(ctx.obj['config'])
    try:
        artifacts = engine.collect(url)
    except Exception as e:
        print_error(f'Ошибка при сборе артефактов: {e}')

    if output:
        saved = dump_artifacts(artifacts, output, pretty=pretty)
        click.echo(f'Snapshot: {saved}')
        return
    click.echo(json.dumps(artifacts_to_dict(artifacts), ensure_ascii=False, indent=2 if pretty else None))


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@report_options
@click.pass_context
def scan(ctx, url, json_output, html_output, template_dir, pretty, strict):
    """Собрать артефакты страницы и проверить source map."""
    engine = Engine(ctx.obj['config'])
    try:
        verdict = engine.scan(url)
    except Exception as e:
        print_error(f'Ошибка при сканировании: {e}')
    emit_report(verdict, json_output, html_output, template_dir, pretty, strict)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
