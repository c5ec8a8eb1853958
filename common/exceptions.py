"""Error taxonomy shared by the relay, the blob server and the CLI."""


class QRDropError(Exception):
    """
    Base exception class for all QRDrop errors.
    """
    pass


class ValidationError(QRDropError):
    """
    Raised when input has the wrong shape or size, before any I/O happens.

    Also raised when a payload decodes cleanly but the decoded structure is
    not a valid envelope.
    """
    pass


class EncodingError(QRDropError):
    """
    Raised when an envelope cannot be serialized into a transport string.
    """
    pass


class DecodingError(QRDropError):
    """
    Raised when a transport string is not base64, not UTF-8 or not JSON.
    """
    pass


class DecryptionError(DecodingError):
    """
    Raised when a password-protected payload cannot be decrypted
    (wrong password or tampered ciphertext).
    """
    pass


class BackendError(QRDropError):
    """
    Raised when the database or the blob store fails or times out.
    """
    pass


class NotFoundError(QRDropError):
    """
    Raised when a well-formed reference points at nothing.
    """
    pass


class ExpiredError(NotFoundError):
    """
    Raised when a reference pointed at something that has since expired.
    """
    pass


class PayloadTooLargeForQR(QRDropError):
    """
    Raised when the text to embed exceeds QR capacity even at the lowest
    error-correction level.
    """
    pass
