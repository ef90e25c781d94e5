"""
sources.py - Record Sources
============================
The interchangeable collaborators a lookup can be backed by. None of them is
authoritative; they all honor the same contract:

    source.lookup(cpf) -> Record | NOT_FOUND
    raises SourceError on transport or server failure

Sources:
--------
- SheetSource : GET the published-sheet CSV export and scan it
- ApiSource   : POST {API_BASE}/consulta with {"cpf": "<11 digits>"}
- FileSource  : scan a locally downloaded export (.csv/.tsv/.xlsx)
"""

import json
import logging

from .config import Settings
from .http_client import HttpClient
from .loader import match_file
from .matcher import RECORD_FIELDS, Record, match


logger = logging.getLogger(__name__)


# =============================================================================
# MESSAGES AND ERRORS
# =============================================================================

# User-facing messages (shown verbatim in the form)
NOT_FOUND_MESSAGE = "CPF não encontrado. Verifique e tente novamente."
TRANSPORT_ERROR_MESSAGE = "Erro ao buscar dados. Tente novamente."

API_ENDPOINT = "/consulta"


class SourceError(RuntimeError):
    """
    A lookup failed before it could say found / not found.

    The message is the one shown to the user: the server-supplied text for
    the API, or TRANSPORT_ERROR_MESSAGE otherwise.
    """

    def __init__(self, message: str = TRANSPORT_ERROR_MESSAGE, status: int = 0):
        super().__init__(message)
        self.message = message
        self.status = status


class NotFoundResult:
    """
    NOT_FOUND plus the message the server gave for it.

    Falsy like NOT_FOUND, so callers can keep testing `if result:`.
    """

    def __init__(self, message: str = NOT_FOUND_MESSAGE):
        self.message = message

    def __bool__(self):
        return False

    def __repr__(self):
        return f"NotFoundResult({self.message!r})"


# =============================================================================
# SOURCES
# =============================================================================

class SheetSource:
    """Looks a CPF up in the published-sheet export."""

    def __init__(self, client: HttpClient, url: str):
        self.client = client
        self.url = url

    def lookup(self, cpf: str):
        status, _content_type, body = self.client.get_text(self.url)

        if not 200 <= status < 300:
            logger.error(f"Sheet export unavailable ({status}): {body[:200].strip()}")
            raise SourceError(TRANSPORT_ERROR_MESSAGE, status)

        logger.debug(f"CSV received (first 500 chars): {body[:500]!r}")
        return match(body, cpf)


class ApiSource:
    """Looks a CPF up through the backend API."""

    def __init__(self, client: HttpClient, endpoint: str = API_ENDPOINT):
        self.client = client
        self.endpoint = endpoint

    def _error_message(self, body: str) -> str | None:
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, ValueError):
            return None
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return None

    def lookup(self, cpf: str):
        """
        POST the CPF and interpret the answer.

        - 200 with a JSON object  -> Record
        - 404                     -> NotFoundResult with the server's message
        - other status            -> SourceError with the server's message
        - network / bad JSON      -> SourceError with the static message
        """
        status, _content_type, body = self.client.post_json(self.endpoint, {"cpf": cpf})

        # 200 OK: the body is the record itself
        if status == 200:
            try:
                data = json.loads(body)
            except (json.JSONDecodeError, ValueError) as e:
                logger.error(f"Invalid JSON response: {str(e)[:50]}")
                raise SourceError(TRANSPORT_ERROR_MESSAGE, status)

            if not isinstance(data, dict):
                logger.error(f"Unexpected response type: {type(data).__name__}")
                raise SourceError(TRANSPORT_ERROR_MESSAGE, status)

            # Absent or null fields render as empty
            return Record(**{
                name: str(data.get(name) or "").strip() for name in RECORD_FIELDS
            })

        # Network failure (reported by HttpClient as status 0)
        if status == 0:
            logger.error(body)
            raise SourceError(TRANSPORT_ERROR_MESSAGE, status)

        # Any other status: the server explains itself as {"error": "..."}
        message = self._error_message(body)
        logger.info(f"API answered {status}: {message or body[:200].strip()}")

        if status == 404:
            return NotFoundResult(message or NOT_FOUND_MESSAGE)
        raise SourceError(message or TRANSPORT_ERROR_MESSAGE, status)


class FileSource:
    """Looks a CPF up in a local copy of the sheet."""

    def __init__(self, path: str):
        self.path = path

    def lookup(self, cpf: str):
        try:
            return match_file(self.path, cpf)
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Could not read {self.path}: {e}")
            raise SourceError(TRANSPORT_ERROR_MESSAGE)


# =============================================================================
# SOURCE SELECTION
# =============================================================================

def build_source(settings: Settings, client: HttpClient | None = None):
    """
    Pick the source named by settings.source.

    The sheet and API sources need an HttpClient; the file source does not.
    """
    if settings.source == "file":
        return FileSource(settings.file_path)

    if client is None:
        raise RuntimeError(f"Source '{settings.source}' needs an HTTP client")

    if settings.source == "api":
        return ApiSource(client)
    return SheetSource(client, settings.sheet_url)
