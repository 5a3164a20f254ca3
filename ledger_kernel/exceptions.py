"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (forms, import jobs, tests) must react to a rejected posting without
parsing message text.  Every error therefore:
  1. Has its own exception class (catch by type, not message)
  2. Carries a class-level CODE attribute (machine-readable, API-safe)
  3. Stores its context as attributes (not just a message string)

Example:
    try:
        header_id = posting_service.post(TransactionKind.BANK_TRANSFER, inputs)
    except IdenticalPartiesError as e:
        show_error(code=e.code, account=e.account_id)
    except ValidationError as e:
        show_error(code=e.code, message=str(e))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from LedgerError:

    LedgerError (base)
    |
    +-- ValidationError                 rejected before any write
    |   +-- UnbalancedEntryError
    |   +-- InvalidAmountError
    |   +-- InvalidRateError
    |   +-- IdenticalPartiesError
    |   +-- MissingSystemConfigurationError
    |   +-- InvalidCurrencyConfigurationError
    |   +-- InvalidLineError
    |   +-- InsufficientLinesError
    |   +-- ConversionMismatchError
    |   +-- AccountNotFoundError
    |   +-- AccountInactiveError
    |   +-- NotACashbookError
    |   +-- CurrencyNotFoundError
    |   +-- KindMismatchError
    |   +-- UnknownTransactionKindError
    |   +-- JournalImportError
    |
    +-- PersistenceError                store failure, savepoint rolled back
    |
    +-- HeaderNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                              | When Raised
-------------|-----------------------------------|-------------------------------------
Validation   | UNBALANCED_ENTRY                  | Base debits != credits (> tolerance)
             | INVALID_AMOUNT                    | Zero/negative/non-numeric amount
             | INVALID_RATE                      | Non-numeric or out-of-range rate
             | IDENTICAL_PARTIES                 | Same account on both legs
             | MISSING_SYSTEM_CONFIGURATION      | Commission account/base/type unset
             | INVALID_CURRENCY_CONFIGURATION    | Non-base currency without a note
             | INVALID_LINE                      | Line with both or neither side set
             | INSUFFICIENT_LINES                | Fewer than two lines
             | CONVERSION_MISMATCH               | Doc amount disagrees with base
             | ACCOUNT_NOT_FOUND                 | Account ID doesn't exist
             | ACCOUNT_INACTIVE                  | Account is deactivated
             | NOT_A_CASHBOOK                    | Cash entry against a non-cashbook
             | CURRENCY_NOT_FOUND                | Currency ID/code doesn't exist
             | KIND_MISMATCH                     | Inputs don't fit the header's kind
             | UNKNOWN_TRANSACTION_KIND          | No posting rule for the kind
             | JOURNAL_IMPORT_ERROR              | Spreadsheet row can't be resolved
-------------|-----------------------------------|-------------------------------------
Persistence  | PERSISTENCE_ERROR                 | Store unreachable / constraint hit
-------------|-----------------------------------|-------------------------------------
Lookup       | HEADER_NOT_FOUND                  | replace_lines on unknown header

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Domain exceptions inherit from Exception, not ValueError, so they can be
   caught as a group without also catching programming errors.

2. Codes are class attributes, readable without instantiation.

3. PersistenceError always chains the driver exception (raise ... from e);
   nothing in this package retries automatically.
"""


class LedgerError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_ERROR"


class ValidationError(LedgerError):
    """Inputs rejected before any write reached the store."""

    code: str = "VALIDATION_ERROR"


class UnbalancedEntryError(ValidationError):
    """Base-currency debits do not equal credits within tolerance."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, debits: str, credits: str, tolerance: str):
        self.debits = debits
        self.credits = credits
        self.tolerance = tolerance
        super().__init__(
            f"Unbalanced entry: debits={debits}, credits={credits} "
            f"(tolerance {tolerance})"
        )


class InvalidAmountError(ValidationError):
    """Amount is missing, non-numeric, or outside its allowed range."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = str(value)
        self.reason = reason
        super().__init__(f"Invalid amount for {field}: {value!r} ({reason})")


class InvalidRateError(ValidationError):
    """Dealing or exchange rate is non-numeric or outside its allowed range."""

    code: str = "INVALID_RATE"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = str(value)
        self.reason = reason
        super().__init__(f"Invalid rate for {field}: {value!r} ({reason})")


class IdenticalPartiesError(ValidationError):
    """Both legs of a transfer reference the same account."""

    code: str = "IDENTICAL_PARTIES"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(
            f"Debit and credit parties must differ (both are {account_id})"
        )


class MissingSystemConfigurationError(ValidationError):
    """A system-level setting (commission account, base currency, type) is unset."""

    code: str = "MISSING_SYSTEM_CONFIGURATION"

    def __init__(self, setting: str, detail: str = ""):
        self.setting = setting
        self.detail = detail
        message = f"Missing system configuration: {setting}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InvalidCurrencyConfigurationError(ValidationError):
    """Currency cannot be used for conversion as configured."""

    code: str = "INVALID_CURRENCY_CONFIGURATION"

    def __init__(self, currency_code: str, reason: str):
        self.currency_code = currency_code
        self.reason = reason
        super().__init__(f"Invalid configuration for currency {currency_code}: {reason}")


class InvalidLineError(ValidationError):
    """A ledger line does not carry exactly one positive side."""

    code: str = "INVALID_LINE"

    def __init__(self, line_no: int, reason: str):
        self.line_no = line_no
        self.reason = reason
        super().__init__(f"Invalid line {line_no}: {reason}")


class InsufficientLinesError(ValidationError):
    """A header must own at least two lines."""

    code: str = "INSUFFICIENT_LINES"

    def __init__(self, line_count: int):
        self.line_count = line_count
        super().__init__(f"Entry needs at least two lines, got {line_count}")


class ConversionMismatchError(ValidationError):
    """A line's document amount disagrees with its base amount."""

    code: str = "CONVERSION_MISMATCH"

    def __init__(self, line_no: int, expected: str, actual: str):
        self.line_no = line_no
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Line {line_no}: base amount {actual} does not match "
            f"converted document amount {expected}"
        )


class AccountNotFoundError(ValidationError):
    """Account with given ID or code was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class AccountInactiveError(ValidationError):
    """Account is deactivated and cannot be posted to."""

    code: str = "ACCOUNT_INACTIVE"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account is inactive: {account_id}")


class NotACashbookError(ValidationError):
    """Cash entries must be booked against a cashbook account."""

    code: str = "NOT_A_CASHBOOK"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account {account_id} is not a cashbook with a currency")


class CurrencyNotFoundError(ValidationError):
    """Currency with given ID or code was not found."""

    code: str = "CURRENCY_NOT_FOUND"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Currency not found: {currency}")


class KindMismatchError(ValidationError):
    """Inputs do not belong to the transaction kind being posted or edited."""

    code: str = "KIND_MISMATCH"

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Transaction kind mismatch: expected {expected}, got {actual}")


class UnknownTransactionKindError(ValidationError):
    """No posting rule is registered for the requested kind."""

    code: str = "UNKNOWN_TRANSACTION_KIND"

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"No posting rule registered for transaction kind: {kind}")


class JournalImportError(ValidationError):
    """A spreadsheet row could not be turned into a journal line."""

    code: str = "JOURNAL_IMPORT_ERROR"

    def __init__(self, row_no: int, reason: str):
        self.row_no = row_no
        self.reason = reason
        super().__init__(f"Row {row_no}: {reason}")


class PersistenceError(LedgerError):
    """The store rejected or failed the write; nothing was persisted."""

    code: str = "PERSISTENCE_ERROR"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class HeaderNotFoundError(LedgerError):
    """Ledger header with given ID was not found."""

    code: str = "HEADER_NOT_FOUND"

    def __init__(self, header_id: str):
        self.header_id = header_id
        super().__init__(f"Ledger header not found: {header_id}")
