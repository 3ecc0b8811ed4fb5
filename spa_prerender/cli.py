# File: spa_prerender/cli.py
"""
Консольная команда ``spa-prerender``.

  spa-prerender [ОПЦИИ] render [--output DIR] [--max-concurrent N]
                               [--discover/--no-discover] [--json] [--timeout SEC]
  spa-prerender [ОПЦИИ] config

``render`` поднимает локальный сервер со сборкой, открывает каждый маршрут
в headless-браузере и пишет ``<output>/<route>/index.html``. ``config``
печатает итоговую конфигурацию (файл плюс значения по умолчанию) в JSON.

Опции группы (--config, --log-level, --log-file, --log-format) задаются
до имени команды:

  spa-prerender -c prerender.yaml --log-level DEBUG render --max-concurrent 4
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from spa_prerender import __version__
from spa_prerender.config import DEFAULT_CONFIG_PATH, load_config
from spa_prerender.engine import start_render
from spa_prerender.logger import init_logging

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _load_or_exit(config_path: Path, **overrides):
    try:
        return load_config(config_path, **overrides)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')


def _run(cfg, timeout):
    coro = start_render(cfg)
    if timeout:
        coro = asyncio.wait_for(coro, timeout=timeout)
    try:
        return asyncio.run(coro)
    except asyncio.TimeoutError:
        print_error(f'Пререндер не завершён за {timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при пререндере: {e}')


def _callable_path(fn) -> str:
    module = getattr(fn, "__module__", None)
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", repr(fn))
    return f"{module}:{name}" if module else name


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='spa-prerender, version %(version)s')
@click.option('--config', '-c', 'config_path',
              default=str(DEFAULT_CONFIG_PATH), show_default=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='YAML/JSON-файл с маршрутами и опциями пререндера.')
@click.option('--log-level', default='INFO', show_default=True,
              type=click.Choice(LOG_LEVELS, case_sensitive=False),
              help='DEBUG показывает найденные ссылки и запуск браузера.')
@click.option('--log-file', default=None,
              type=click.Path(dir_okay=False, path_type=Path),
              help='Дублировать логи в файл с ротацией.')
@click.option('--log-format', default=None,
              help='Формат logging.Formatter вместо стандартного.')
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Пререндер маршрутов SPA в статический HTML."""
    logging_opts = {'level': log_level.upper(), 'log_file': log_file}
    if log_format:
        logging_opts['log_format'] = log_format
    init_logging(**logging_opts)
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('render', context_settings=CONTEXT_SETTINGS)
@click.option('--output', '-o', 'output_dir', default=None,
              type=click.Path(file_okay=False, path_type=Path),
              help='Каталог для HTML вместо output_dir из конфига.')
@click.option('--max-concurrent', type=click.IntRange(min=1), default=None,
              help='Сколько маршрутов рендерить одновременно.')
@click.option('--discover/--no-discover', default=None,
              help='Добавлять в очередь маршруты из ссылок на отрендеренных страницах.')
@click.option('--json', 'as_json', is_flag=True,
              help='Напечатать итог прогона в JSON.')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Ограничение на весь прогон, секунд.')
@click.pass_context
def render(ctx, output_dir, max_concurrent, discover, as_json, timeout):
    """Отрендерить маршруты и записать страницы на диск."""
    cfg = _load_or_exit(
        ctx.obj['config_path'],
        output_dir=output_dir,
        max_concurrent=max_concurrent,
        discover_new_routes=discover,
    )
    summary = _run(cfg, timeout)

    if as_json:
        click.echo(json.dumps(summary.to_dict(), ensure_ascii=False, indent=2))
        return
    click.echo(f'Rendered {summary.count} route(s) into {summary.output_dir}')
    for route in summary.routes:
        click.echo(f'  {route}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Напечатать итоговую конфигурацию в JSON."""
    cfg = _load_or_exit(ctx.obj['config_path'])
    data = cfg.model_dump(mode='json', exclude={'post_process'})
    data['post_process'] = _callable_path(cfg.post_process) if cfg.post_process else None
    click.echo(json.dumps(data, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    cli()
