"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from functools import wraps
from typing import Generator
from .progress import get_progress
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import format_output, get_format_from_env, FORMATS


def _emit_error(exc: Exception, **extra):
    error_obj = {
        "error": str(exc),
        "type": type(exc).__name__,
    }
    error_obj.update(extra)
    print(json.dumps(error_obj, ensure_ascii=False), flush=True)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Progress reporting on stderr
    - Formatted data output on stdout (jsonl by default)
    - --quiet/-q to suppress data output
    - Consistent error handling and exit codes

    The wrapped command receives a `progress` reporter and returns a
    generator, list or dict of records, or None if it printed its own output.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.get('verbose', False)
        quiet = kwargs.get('quiet', False)
        output_format = kwargs.get('format', None) or get_format_from_env('jsonl')
        fields_str = kwargs.get('fields', None)
        fields = fields_str.split(',') if fields_str else None

        progress = get_progress(enabled=verbose or None)
        kwargs['progress'] = progress

        try:
            result = func(*args, **kwargs)

            if quiet:
                # Consume the generator so the command still runs
                if isinstance(result, Generator):
                    for _ in result:
                        pass
            elif result is None:
                pass
            elif output_format == 'table':
                # Commands render tables themselves
                if isinstance(result, Generator):
                    for _ in result:
                        pass
            else:
                if isinstance(result, dict):
                    result = [result]
                for line in format_output(result, output_format, fields):
                    print(line, flush=True)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            progress.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            progress.error(str(e))
            if not quiet:
                extra = {"exit_code": e.exit_code}
                if hasattr(e, 'succeeded'):
                    extra['succeeded'] = e.succeeded
                    extra['failed'] = e.failed
                _emit_error(e, **extra)
            sys.exit(e.exit_code)
        except Exception as e:
            progress.error(f"Command failed: {e}")
            if not quiet:
                _emit_error(e)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Show progress and debug logging even when piped'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Suppress data output, show only progress'),
    'format': click.option('-f', '--format',
                           type=click.Choice(list(FORMATS)),
                           help='Output format (default: jsonl, or from PUBSTATUS_FORMAT env)'),
    'fields': click.option('--fields',
                           help='Comma-separated list of columns to include (for CSV/TSV)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'quiet')
        def my_command(verbose, quiet):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
