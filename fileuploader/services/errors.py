"""Exception hierarchy for the authentication core and the file store."""


class AuthError(Exception):
    """Base authentication error."""

    pass


# --- Credential store ---


class CredentialError(AuthError):
    """Credential store failure."""

    pass


class InvalidAccountInputError(CredentialError):
    """Username or password does not meet the account policy."""

    pass


class DuplicateUsernameError(CredentialError):
    """An account with this username already exists."""

    pass


class AccountNotFoundError(CredentialError):
    """No account matches the lookup."""

    pass


class StorageError(CredentialError):
    """The backing database failed."""

    pass


class InvalidCredentialsError(AuthError):
    """Invalid username or password.

    Raised for both unknown users and wrong passwords so callers cannot
    enumerate usernames.
    """

    pass


# --- Session token codec ---


class TokenError(AuthError):
    """Session token could not be validated."""

    pass


class MalformedTokenError(TokenError):
    """Token is not a well-formed signed token or lacks required claims."""

    pass


class BadSignatureError(TokenError):
    """Token signature does not verify against the signing secret."""

    pass


class TokenExpiredError(TokenError):
    """Token is past its expiry."""

    pass


class UnsupportedAlgorithmError(TokenError):
    """Token was signed with an algorithm other than the configured one."""

    pass


# --- Authentication gate ---


class AuthenticationError(AuthError):
    """A request could not be authenticated."""

    pass


class MissingTokenError(AuthenticationError):
    """No token was presented."""

    pass


class TokenRevokedError(AuthenticationError):
    """Token was revoked by logout."""

    pass


class InvalidTokenError(AuthenticationError):
    """Token failed validation; the underlying TokenError is the __cause__."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


# --- File store ---


class FileStoreError(Exception):
    """Base file store error."""

    pass


class UnsupportedFileTypeError(FileStoreError):
    """Upload is not an accepted image type."""

    pass


class FileTooLargeError(FileStoreError):
    """Upload exceeds the configured size limit."""

    def __init__(self, limit: int):
        super().__init__(f"File size exceeds {limit} bytes limit")
        self.limit = limit


class StoredFileNotFoundError(FileStoreError):
    """No such file, or its bytes are missing from disk."""

    pass


class FileAccessDeniedError(FileStoreError):
    """File belongs to another account."""

    pass
