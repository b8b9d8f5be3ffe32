# opensig/core/errors.py
"""Error taxonomy shared by the signing and verification paths."""


class OpenSigError(Exception):
    """Base class for every error raised by opensig."""


class CryptoUnavailableError(OpenSigError, RuntimeError):
    def __init__(self, message: str = "Crypto capability not available"):
        super().__init__(message)


class NotVerifiedError(OpenSigError, RuntimeError):
    def __init__(self, message: str = "Must verify before signing"):
        super().__init__(message)


class DocumentNotIdentifiedError(OpenSigError, RuntimeError):
    def __init__(self, message: str = "Document hash has not been set"):
        super().__init__(message)


class BlockchainNotSupportedError(OpenSigError):
    def __init__(self, chain_id=None):
        self.chain_id = chain_id
        suffix = f" (chain id {chain_id})" if chain_id is not None else ""
        super().__init__(f"Blockchain not supported{suffix}")


class LedgerError(OpenSigError):
    """Raised by ledger clients when a request cannot be served."""


class TransactionError(LedgerError):
    pass


class TransactionRevertedError(TransactionError):
    def __init__(self, receipt):
        self.receipt = receipt
        super().__init__(f"Transaction {receipt.transaction_hash} reverted")


class ConfirmationTimeoutError(TransactionError):
    def __init__(self, transaction_hash: str, timeout: float):
        self.transaction_hash = transaction_hash
        self.timeout = timeout
        super().__init__(f"Transaction {transaction_hash} not confirmed within {timeout}s")


class DecryptionError(OpenSigError):
    pass
