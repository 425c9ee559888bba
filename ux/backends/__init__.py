from .base import (
    AUTH_SIGNED_IN,
    AUTH_SIGNED_OUT,
    AUTH_USER_UPDATED,
    AuthEventStream,
    BackendError,
    RegistrationBackend,
)
