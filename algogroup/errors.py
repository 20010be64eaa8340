"""Machine-readable error categories for group signing and submission failures."""


class AlgoGroupError(Exception):
    """Base exception for all algogroup errors."""


class MissingKeyError(AlgoGroupError):
    """A wallet expected to sign locally carries no private key."""


class MalformedEnvelopeError(AlgoGroupError):
    """Envelope transport data is not valid base64 or not a well-formed transaction."""


class IncompleteSigningError(AlgoGroupError):
    """Submission attempted before every envelope in the group was signed."""

    def __init__(self, unsigned_indexes: list[int]):
        self.unsigned_indexes = list(unsigned_indexes)
        super().__init__(
            f"{len(self.unsigned_indexes)} envelope(s) not signed: "
            f"indexes {self.unsigned_indexes}"
        )


class UnhandledStateTypeError(AlgoGroupError):
    """Node reported a state value with an unknown type discriminator."""


class ConfirmationTimeout(AlgoGroupError):
    """Confirmation was not observed within the round or time bound.

    This doesn't necessarily mean the transaction failed - it may still
    be pending or already confirmed on the ledger.
    """

    def __init__(self, txid: str, rounds_waited: int, message: str):
        self.txid = txid
        self.rounds_waited = rounds_waited
        super().__init__(message)


class ConfirmationCancelled(AlgoGroupError):
    """Confirmation wait was cancelled by the caller."""


class TransactionRejectedError(AlgoGroupError):
    """Node dropped the transaction from its pool (pool-error reported)."""


class NodeError(AlgoGroupError):
    """Ledger node transport or API error."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SignerError(AlgoGroupError):
    """Signer output does not line up with the batch it was given."""


class RemoteSignerError(SignerError):
    """Remote approval channel failed or answered with an invalid response."""


class WalletError(AlgoGroupError):
    """Wallet key loading or generation error."""


class SignatureError(AlgoGroupError):
    """Signature verification failed."""


class CanonicalizationError(AlgoGroupError):
    """JSON canonicalization failed."""
