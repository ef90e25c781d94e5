"""
run_consulta.py - Main Application Entry Point
===============================================
Looks up a student record by CPF from the terminal.

What it does:
-------------
1. Loads configuration from environment variables (.env file)
2. Builds the configured source (published sheet, backend API or local file)
3. Validates the CPF (11 digits) before any request is made
4. Prints the matched record, or the error message

Usage:
------
    python -m consulta.run_consulta --cpf 111.222.333-44
    python -m consulta.run_consulta --source api
    python -m consulta.run_consulta --file turma.xlsx --cpf 11122233344

Command Line Options:
---------------------
    --cpf       : CPF to look up; without it an interactive prompt starts
    --source    : "sheet", "api" or "file" (default: CONSULTA_SOURCE or "sheet")
    --file      : Local export to search (implies --source file)
    --debug     : Enable debug logging for troubleshooting

Exit status (one-shot mode):
----------------------------
    0 = record found, 1 = not found or lookup error, 2 = invalid CPF
    Interactive mode exits with 0 when the user leaves (sair, EOF, Ctrl+C).
"""

import sys
import logging
import argparse

from .config import SOURCES, load_settings
from .http_client import HttpClient
from .render import TITLE, render_session
from .session import INVALID_CPF_MESSAGE, QuerySession
from .sources import build_source


LOG_LEVEL = logging.INFO

EXIT_OK = 0
EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_INVALID = 2

QUIT_WORDS = {"sair", "exit", "quit"}


logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%H:%M:%S'
)

logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description='Consulta acadêmica por CPF',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m consulta.run_consulta --cpf 111.222.333-44
  python -m consulta.run_consulta --source api
  python -m consulta.run_consulta --file turma.xlsx --cpf 11122233344
        """
    )

    parser.add_argument(
        '--cpf',
        default=None,
        help='CPF to look up (masked or digits only); omit for interactive mode'
    )

    parser.add_argument(
        '--source',
        choices=SOURCES,
        default=None,
        help='Record source (default: CONSULTA_SOURCE or "sheet")'
    )

    parser.add_argument(
        '--file',
        default=None,
        help='Local .csv/.tsv/.xlsx export to search (implies --source file)'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def run_once(session: QuerySession, cpf: str) -> int:
    """Run a single lookup, print the outcome, and return the exit status."""
    found = session.submit(cpf)
    print(render_session(session))

    if found:
        return EXIT_FOUND
    if session.error == INVALID_CPF_MESSAGE:
        return EXIT_INVALID
    return EXIT_NOT_FOUND


def run_interactive(session: QuerySession):
    print(TITLE)
    print("Digite o CPF (ou 'sair').")
    print(render_session(session))

    while True:
        try:
            raw = input("CPF> ").strip()
        except EOFError:
            print()
            return
        if raw.lower() in QUIT_WORDS:
            return
        if not raw:
            continue

        # Echo the input the way the masked field would show it
        print(f"CPF: {session.type_input(raw)}")
        session.submit()
        print(render_session(session))


def run_consulta(argv=None) -> int:
    """
    Main execution logic.

    Returns the process exit status. Configuration errors are logged and
    reported as status 1; Ctrl+C ends interactive mode cleanly.
    """
    args = parse_arguments(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    source_name = args.source or ('file' if args.file else None)
    client = None

    try:
        settings = load_settings(source=source_name, file_path=args.file)
        logger.info(f"Source: {settings.source}")

        if settings.source != 'file':
            client = HttpClient(settings)
        session = QuerySession(build_source(settings, client))

        if args.cpf is not None:
            return run_once(session, args.cpf)

        run_interactive(session)
        return EXIT_OK

    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        return EXIT_OK

    except RuntimeError as e:
        logger.error(f"Fatal error: {e}")
        return EXIT_NOT_FOUND

    finally:
        if client:
            client.close()


def main():
    sys.exit(run_consulta())


if __name__ == '__main__':
    main()
