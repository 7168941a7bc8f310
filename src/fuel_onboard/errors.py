"""Exception types raised by the onboarding engine."""


class OnboardingError(Exception):
    """Base class for onboarding failures."""


class OnboardingValidationError(OnboardingError):
    """Local input failed validation; carries a translation key, never text."""

    def __init__(self, i18n_key: str, i18n_params: dict | None = None):
        super().__init__(i18n_key)
        self.i18n_key = i18n_key
        self.i18n_params = i18n_params or {}


class SyncError(OnboardingError):
    """A background draft save failed. Only ever recorded on SyncState."""


class FlushError(OnboardingError):
    """The blocking draft flush could not be confirmed."""


class CommitTimeout(OnboardingError):
    """The final profile commit did not answer in time; safe to retry."""

    i18n_key = "onboarding.error_service_waking_up"


class IntegrityError(OnboardingError):
    """Backing data is inconsistent (e.g. no active legal documents)."""


class FinalizationInProgress(OnboardingError):
    """A finalization for this session is already running."""


class ProfileNotFound(OnboardingError):
    """No profile row exists for the requested id."""

    def __init__(self, profile_id: int):
        super().__init__(f"Profile {profile_id} not found")
        self.profile_id = profile_id


class AlreadyFinalized(OnboardingError):
    """The session has already been committed; completion happens once."""
