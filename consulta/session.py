"""
session.py - Query Session
===========================
Holds the state behind the lookup form and runs one query at a time.

Presentation state:
-------------------
- cpf_input : what the input field shows (masked as the user types, at most
              14 characters like "000.000.000-00")
- result    : the matched Record, or None
- error     : the message shown in the alert, or ""
- loading   : True while a query is in flight (submit is disabled)

Every query gets a sequence number. Only the outcome of the latest query is
applied; an outcome that arrives for an older sequence is discarded, so a
slow stale response can never overwrite a newer one.
"""

import itertools
import logging

from .cpf import MASKED_LENGTH, InvalidCPFError, format_cpf, require_valid
from .matcher import Record
from .sources import NOT_FOUND_MESSAGE, SourceError, TRANSPORT_ERROR_MESSAGE


logger = logging.getLogger(__name__)


INVALID_CPF_MESSAGE = "Por favor, digite um CPF válido."


class QuerySession:

    def __init__(self, source):
        self.source = source

        self.cpf_input = ""
        self.result: Record | None = None
        self.error = ""
        self.loading = False

        self._seq = itertools.count(1)
        self._latest = 0

    # -------------------------------------------------------------------------
    # INPUT
    # -------------------------------------------------------------------------

    def type_input(self, raw: str) -> str:
        """
        Store the input as typed, with the CPF mask applied.

        Like the form field, the input holds at most MASKED_LENGTH characters;
        anything typed past that is dropped before the mask is applied.
        """
        self.cpf_input = format_cpf(raw[:MASKED_LENGTH])
        return self.cpf_input

    # -------------------------------------------------------------------------
    # QUERY SEQUENCING
    # -------------------------------------------------------------------------

    def begin(self) -> int:
        """Start a query: clear the previous outcome and return its sequence."""
        self._latest = next(self._seq)
        self.loading = True
        self.error = ""
        self.result = None
        return self._latest

    def finish(self, seq: int, outcome) -> bool:
        """
        Apply a query outcome, unless a newer query has started since.

        Args:
            seq: The sequence returned by begin() for this query
            outcome: A Record, a not-found result, or a SourceError

        Returns:
            True if applied, False if the outcome was stale and discarded
        """
        if seq != self._latest:
            logger.debug(f"Discarding stale outcome for query {seq} (latest is {self._latest})")
            return False

        if isinstance(outcome, Record):
            self.result = outcome
        elif isinstance(outcome, SourceError):
            self.error = outcome.message or TRANSPORT_ERROR_MESSAGE
        else:
            # NOT_FOUND, or the API's not-found carrying its own message
            self.error = getattr(outcome, "message", None) or NOT_FOUND_MESSAGE

        self.loading = False
        return True

    # -------------------------------------------------------------------------
    # SUBMIT
    # -------------------------------------------------------------------------

    def submit(self, raw: str | None = None) -> bool:
        """
        Validate the input and run the lookup.

        Args:
            raw: New input text; when None the current cpf_input is used

        Returns:
            True if a record was found and is now in `result`
        """
        if raw is not None:
            self.type_input(raw)

        # The submit button is disabled while a query is pending
        if self.loading:
            logger.debug("Query already in progress, ignoring submit")
            return False

        # Validation happens before any request is made
        try:
            cpf = require_valid(self.cpf_input)
        except InvalidCPFError as e:
            logger.debug(str(e))
            self.result = None
            self.error = INVALID_CPF_MESSAGE
            return False

        seq = self.begin()
        logger.info(f"Searching CPF {format_cpf(cpf)}")
        try:
            outcome = self.source.lookup(cpf)
        except SourceError as e:
            outcome = e
        except Exception:
            # Keep the form usable after an unexpected failure
            logger.exception("Unexpected error during lookup")
            outcome = SourceError(TRANSPORT_ERROR_MESSAGE)

        self.finish(seq, outcome)
        return self.result is not None
