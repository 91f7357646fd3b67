"""Custom exceptions for the Staly backend.

These exceptions provide structured error handling that:
- Separates internal details from user-facing messages
- Gives every authentication failure its own type
- Keeps user messages localized at the point they are raised
"""

from staly.core.localization import localized_text


class StalyError(Exception):
    """Base exception for Staly errors."""

    def __init__(self, message: str, user_message: str | None = None):
        """
        Initialize Staly error.

        Args:
            message: Internal error message for logging/debugging
            user_message: Safe message to show to users (defaults to generic message)
        """
        super().__init__(message)
        self.user_message = user_message or localized_text(
            "処理中にエラーが発生しました。",
            "An error occurred while processing your request.",
        )


class AuthError(StalyError):
    """Base class for authentication failures."""


class InvalidCredentialsError(AuthError):
    """Email or password rejected."""

    def __init__(self, message: str = "Invalid credentials", user_message: str | None = None):
        super().__init__(
            message,
            user_message or localized_text(
                "メールアドレスまたはパスワードが不正です。",
                "The email address or password is invalid.",
            ),
        )


class AccountNotFoundError(AuthError):
    """No email account is registered for the address."""

    def __init__(self, message: str = "Account not found", user_message: str | None = None):
        super().__init__(
            message,
            user_message or localized_text(
                "アカウントが見つかりません。新規登録してください。",
                "Account not found. Please create a new account.",
            ),
        )


class AccountAlreadyExistsError(AuthError):
    """The normalized email is already registered."""

    def __init__(self, message: str = "Account already exists", user_message: str | None = None):
        super().__init__(
            message,
            user_message or localized_text(
                "このメールアドレスはすでに登録されています。",
                "This email address is already registered.",
            ),
        )


class NotAuthenticatedError(AuthError):
    """An operation needs a signed-in user and there is none."""

    def __init__(self, message: str = "No active session", user_message: str | None = None):
        super().__init__(
            message,
            user_message or localized_text(
                "ログイン状態が見つかりません。",
                "No active session was found.",
            ),
        )


class MissingThirdPartyNonceError(AuthError):
    """Apple sign-in completed without a prepared nonce."""

    def __init__(self, message: str = "Missing sign-in nonce", user_message: str | None = None):
        super().__init__(
            message,
            user_message or localized_text(
                "Appleサインインの内部状態が失われました。再度お試しください。",
                "Apple sign-in internal state was lost. Please try again.",
            ),
        )


class InvalidThirdPartyCredentialError(AuthError):
    """The provider returned no usable credential."""

    def __init__(self, message: str = "Invalid third-party credential", user_message: str | None = None):
        super().__init__(
            message,
            user_message or localized_text(
                "Appleサインインの認証情報を取得できませんでした。",
                "Could not retrieve Apple sign-in credentials.",
            ),
        )


class InvalidThirdPartyTokenError(AuthError):
    """The credential carried no readable identity token."""

    def __init__(self, message: str = "Invalid third-party identity token", user_message: str | None = None):
        super().__init__(
            message,
            user_message or localized_text(
                "AppleのIDトークンを取得できませんでした。",
                "Could not retrieve Apple ID token.",
            ),
        )


class RemoteSignInError(AuthError):
    """The remote identity backend rejected or failed the sign-in."""

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(
            message,
            user_message or localized_text(
                "サインインサーバーに接続できませんでした。",
                "Could not reach the sign-in server. Please try again.",
            ),
        )


class StayValidationError(StalyError):
    """A stay record violates its invariants."""

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(
            message,
            user_message or localized_text(
                "チェックアウト日はチェックイン日以降にしてください。",
                "Check-out must be on or after check-in.",
            ),
        )
