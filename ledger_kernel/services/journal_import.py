"""
JournalImportService -- spreadsheet rows to a JournalVoucherInput.

Responsibility:
    Resolves the account, currency and date columns of an exported journal
    sheet against master data and produces the input the journal voucher
    rule consumes.  Amount validation stays with the rule, so an imported
    voucher is checked exactly like a hand-keyed one.

Rows come either as mappings or from an .xlsx sheet read with openpyxl.

Expected columns:
    Date, Narration, Account, Currency, Currency Rate,
    Debit (Doc Currency), Credit (Doc Currency)

Failure modes:
    - JournalImportError(row_no, reason) for an unknown account or currency,
      an unreadable date, or an empty sheet.  Rows are numbered from 1.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.dtos import EntryStatus
from ledger_kernel.domain.inputs import JournalLineInput, JournalVoucherInput
from ledger_kernel.domain.settings import EngineSettings
from ledger_kernel.exceptions import JournalImportError, MissingSystemConfigurationError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.reference_data import ReferenceDataService

logger = get_logger("services.journal_import")

# Spreadsheet serial day 0
EXCEL_EPOCH = date(1899, 12, 30)

COL_DATE = "Date"
COL_NARRATION = "Narration"
COL_ACCOUNT = "Account"
COL_CURRENCY = "Currency"
COL_RATE = "Currency Rate"
COL_DEBIT = "Debit (Doc Currency)"
COL_CREDIT = "Credit (Doc Currency)"


def parse_sheet_date(value: object) -> date | None:
    """
    Read a spreadsheet date cell.

    Accepts date/datetime objects, serial day numbers (days since
    1899-12-30) and ISO ``YYYY-MM-DD`` strings.  Blank cells give None.

    Raises:
        ValueError: the cell holds something else.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        raise ValueError(f"not a date: {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return EXCEL_EPOCH + timedelta(days=int(value))
    text = str(value).strip()
    try:
        return EXCEL_EPOCH + timedelta(days=int(Decimal(text)))
    except (InvalidOperation, ValueError):
        pass
    return date.fromisoformat(text[:10])


def _blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _cell_value(cell: Any) -> Any:
    """Value of an openpyxl cell; whole floats become ints, text is stripped."""
    if cell is None or cell.value is None:
        return None
    value = cell.value
    if isinstance(value, float) and value == int(value):
        return int(value)
    if isinstance(value, str):
        return value.strip()
    return value


def read_journal_rows(
    source_path: Path | str,
    sheet_name: str | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Yield the data rows of an .xlsx journal sheet keyed by the header row.

    The first row holds the column names.  Blank rows are skipped.  Uses the
    active sheet unless ``sheet_name`` is given.
    """
    try:
        import openpyxl
    except ImportError as e:
        raise ImportError("XLSX support requires openpyxl. Install with: pip install openpyxl") from e

    wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
    try:
        sheet = wb[sheet_name] if sheet_name else wb.active
        rows = sheet.iter_rows()
        header_row = next(rows, None)
        if header_row is None:
            return
        headers = [str(_cell_value(c) or f"Column_{i + 1}") for i, c in enumerate(header_row)]
        for row in rows:
            values = [_cell_value(c) for c in row]
            if all(_blank(v) for v in values):
                continue
            yield dict(zip(headers, values))
    finally:
        wb.close()


class JournalImportService(BaseService[Account]):
    """
    Builds journal voucher inputs from imported rows.

    Usage:
        importer = JournalImportService(session, settings)
        inputs = importer.build_input(rows)
        posting_service.post(TransactionKind.JOURNAL_VOUCHER, inputs)
    """

    def __init__(self, session: Session, settings: EngineSettings):
        super().__init__(session)
        self._settings = settings
        self._reference = ReferenceDataService(session)

    def build_input(
        self,
        rows: Iterable[Mapping[str, object]],
        transaction_date: date | None = None,
        description: str = "",
        status: EntryStatus = EntryStatus.POSTED,
    ) -> JournalVoucherInput:
        """
        Turn ``rows`` into a JournalVoucherInput.

        The voucher date and description default to the first row's Date
        and Narration.  Account cells match an account code exactly or an
        account name case-insensitively.  A blank Currency means the base
        currency; a blank Currency Rate leaves the currency's rate to apply.
        """
        rows = list(rows)
        if not rows:
            raise JournalImportError(0, "no rows to import")
        if self._settings.base_currency_id is None:
            raise MissingSystemConfigurationError("base_currency")

        first = rows[0]
        if transaction_date is None:
            try:
                transaction_date = parse_sheet_date(first.get(COL_DATE))
            except ValueError as exc:
                raise JournalImportError(1, f"unreadable date: {exc}") from exc
            if transaction_date is None:
                raise JournalImportError(1, "no transaction date")
        if not description:
            description = str(first.get(COL_NARRATION) or "")

        lines = tuple(
            self._build_line(row_no, row) for row_no, row in enumerate(rows, start=1)
        )
        logger.info(
            "journal_import_built",
            extra={"row_count": len(lines), "transaction_date": transaction_date},
        )
        return JournalVoucherInput(
            transaction_date=transaction_date,
            lines=lines,
            description=description,
            status=status,
        )

    def build_input_from_workbook(
        self,
        source_path: Path | str,
        sheet_name: str | None = None,
        **kwargs: Any,
    ) -> JournalVoucherInput:
        """build_input() over the rows of an .xlsx journal sheet."""
        rows = list(read_journal_rows(source_path, sheet_name))
        logger.debug(
            "journal_workbook_read",
            extra={"source": str(source_path), "row_count": len(rows)},
        )
        return self.build_input(rows, **kwargs)

    def _build_line(self, row_no: int, row: Mapping[str, object]) -> JournalLineInput:
        narration = row.get(COL_NARRATION)
        return JournalLineInput(
            account_id=self._resolve_account(row_no, row.get(COL_ACCOUNT)),
            currency_id=self._resolve_currency(row_no, row.get(COL_CURRENCY)),
            exchange_rate=None if _blank(row.get(COL_RATE)) else row.get(COL_RATE),
            debit=row.get(COL_DEBIT),
            credit=row.get(COL_CREDIT),
            narration=None if _blank(narration) else str(narration).strip(),
        )

    def _resolve_account(self, row_no: int, value: object) -> UUID:
        if _blank(value):
            raise JournalImportError(row_no, "account is empty")
        text = str(value).strip()
        account = self._reference.account_by_code(text) or self._reference.account_by_name(text)
        if account is None:
            raise JournalImportError(row_no, f"unknown account {text!r}")
        return account.id

    def _resolve_currency(self, row_no: int, value: object) -> UUID:
        if _blank(value):
            return self._settings.base_currency_id
        currency = self._reference.currency_by_code(str(value))
        if currency is None:
            raise JournalImportError(row_no, f"unknown currency {str(value).strip()!r}")
        return currency.id
