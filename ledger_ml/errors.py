"""Service error types."""


class LedgerMLError(Exception):
    """Base class for all ledger-ml errors."""


class DependencyUnavailableError(LedgerMLError):
    """Embedding service or vector index unreachable after retries."""

    def __init__(self, service: str, cause: Exception | None = None):
        self.service = service
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"{service} unavailable{detail}")


class TransactionNotFoundError(LedgerMLError):
    """Transaction missing, unclassified or not completed."""

    def __init__(self, transaction_id: object, tenant: str):
        self.transaction_id = transaction_id
        self.tenant = tenant
        super().__init__(
            f"Transaction {transaction_id} not found or not classified (tenant={tenant})"
        )


class RuleNotFoundError(LedgerMLError):
    """Classification rule does not exist for the tenant."""

    def __init__(self, rule_id: int):
        self.rule_id = rule_id
        super().__init__(f"Rule {rule_id} not found")


class InvalidRequestError(LedgerMLError):
    """Caller supplied input the service cannot act on."""
