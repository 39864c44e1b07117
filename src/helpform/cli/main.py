"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from helpform import __version__

logger = logging.getLogger(__name__)


def default_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    """Where setup_logging() writes for the given flags."""
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / "helpform-debug.log"
    return Path.home() / ".helpform" / "logs" / "helpform.log"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> None:
    """
    Configure logging for the application.

    The terminal belongs to the TUI, so everything goes to a rotating file.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode with file logging in the current directory
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)
    """
    if debug:
        level = logging.DEBUG
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Explicit level wins when logging to a custom file
    if log_file:
        level = getattr(logging, log_level.upper())

    log_path = default_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Keeps last 5 files, max 10MB each
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")


@click.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.version_option(version=__version__, prog_name="helpform")
@click.argument("tool")
@click.argument("tool_args", nargs=-1, type=click.UNPROCESSED)
@click.option(
    '--config',
    'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Configuration file (default: ~/.helpform/config.json)'
)
@click.option(
    '--help-flag',
    type=str,
    default=None,
    help='Flag that makes the tool print its help (default: --help)'
)
@click.option(
    '--case-insensitive-choices/--case-sensitive-choices',
    default=None,
    help='Accept choice values regardless of case'
)
@click.option(
    '--remember-values/--reset-values',
    default=None,
    help='Keep a subcommand\'s values when leaving and re-entering it'
)
@click.option(
    '--cwd',
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help='Directory to run the tool in'
)
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./helpform-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Custom log file path'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(
    tool: str,
    tool_args: tuple[str, ...],
    config_path: Optional[Path],
    help_flag: Optional[str],
    case_insensitive_choices: Optional[bool],
    remember_values: Optional[bool],
    cwd: Optional[Path],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    helpform - fill in a command line through a form built from --help.

    Runs TOOL --help, turns the options, arguments and subcommands it
    documents into an interactive form, and runs the command you build.
    Output streams into the window and the exit status is shown when the
    tool finishes.

    Extra TOOL_ARGS are kept in front of every invocation, which lets you
    wrap interpreters and scripts.

    \b
    Keys:
      ctrl+r   run the command
      escape   back to parent command / cancel run / back to form
      ctrl+l   clear the focused field
      ctrl+q   quit

    \b
    Examples:
      helpform cargo
      helpform ./target/debug/mytool
      helpform python app.py
      helpform --debug git
    """
    # Lazy imports keep --help and --version fast
    from helpform.core import CommandCatalog, ExecutionBridge, FormEngine, SessionController
    from helpform.exceptions import ErrorContext, format_error_for_display
    from helpform.models import AppConfig
    from helpform.parsing import SubprocessHelpSource
    from helpform.tui import HelpFormApp

    setup_logging(verbose, debug, log_file, log_level)
    log_path = default_log_path(debug, log_file)

    logger.info(f"Starting helpform for {tool} {' '.join(tool_args)}".rstrip())

    controller = None
    try:
        config = AppConfig.load_or_default(config_path)

        # Command line overrides the config file
        if help_flag is not None:
            config.help_flag = help_flag
        if case_insensitive_choices is not None:
            config.case_insensitive_choices = case_insensitive_choices
        if remember_values is not None:
            config.remember_values = remember_values
        if cwd is not None:
            config.working_directory = cwd

        base_argv = [tool, *tool_args]
        root_name = Path(tool_args[-1] if tool_args else tool).name

        source = SubprocessHelpSource(
            base_argv,
            help_flag=config.help_flag,
            timeout=config.help_timeout,
            cwd=config.working_directory,
            extra_env=config.extra_env,
        )
        catalog = CommandCatalog(
            source,
            root_name,
            ignored_flags=[*config.ignored_flags, config.help_flag],
            ignored_subcommands=config.ignored_subcommands,
        )
        controller = SessionController(
            catalog,
            engine=FormEngine(case_insensitive_choices=config.case_insensitive_choices),
            bridge=ExecutionBridge(cwd=config.working_directory, env=config.extra_env),
            base_argv=base_argv,
            remember_values=config.remember_values,
        )
        with ErrorContext(f"read help for {root_name}", logger):
            controller.start()

        HelpFormApp(controller).run()

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        click.echo("\nShutting down...", err=True)
    except click.Abort:
        raise
    except Exception as e:
        logger.exception("Error running helpform")

        user_message, recovery_hint = format_error_for_display(e)

        click.echo("\n" + "="*70, err=True)
        click.echo(f"ERROR: {user_message}", err=True)
        click.echo("="*70, err=True)

        if recovery_hint:
            click.echo(f"\n{recovery_hint}", err=True)

        click.echo(f"\nFor details, check the log file: {log_path}", err=True)
        click.echo("For logging options, run: helpform --help", err=True)

        sys.exit(1)
    finally:
        if controller is not None:
            controller.quit()


if __name__ == "__main__":
    cli()
