# core/supabase_auth.py
# Custom DRF authentication class to verify Supabase JWTs

import logging

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = logging.getLogger("teamreg.auth")

User = get_user_model()


def profile_from_claims(payload: dict) -> dict:
    """
    Pull the display profile out of a Supabase access token.

    The OAuth provider's profile lands in `user_metadata`; Google fills
    `full_name`/`name` and `avatar_url`/`picture`.
    """
    metadata = payload.get("user_metadata") or {}
    return {
        "full_name": metadata.get("full_name") or metadata.get("name") or "",
        "avatar_url": metadata.get("avatar_url") or metadata.get("picture") or "",
    }


class SupabaseJWTAuthentication(BaseAuthentication):
    """
    Custom authentication class that validates Supabase JWTs.

    This authenticator:
    1. Extracts the JWT from the Authorization header
    2. Verifies the token signature using the Supabase JWT secret
    3. Looks up or creates a Django user keyed by the Supabase user ID
    """

    def authenticate(self, request):
        auth_header = request.headers.get("Authorization", "")

        if not auth_header.startswith("Bearer "):
            return None  # Let other auth backends handle it

        token = auth_header.split(" ", 1)[1]

        supabase_jwt_secret = settings.SUPABASE_JWT_SECRET
        if not supabase_jwt_secret:
            logger.warning("SUPABASE_JWT_SECRET not configured")
            return None

        try:
            # Supabase uses HS256 by default
            payload = jwt.decode(
                token,
                supabase_jwt_secret,
                algorithms=["HS256"],
                audience="authenticated",
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid Supabase token: {e}")
            raise AuthenticationFailed("Invalid token")

        supabase_user_id = payload.get("sub")
        if not supabase_user_id:
            raise AuthenticationFailed("Invalid token: missing user ID")

        user = self._get_or_create_user(supabase_user_id, payload.get("email"), payload)
        return (user, payload)

    def authenticate_header(self, request):
        return 'Bearer realm="api"'

    def _get_or_create_user(self, supabase_user_id: str, email: str, payload: dict):
        """
        Get or create a Django user for a Supabase identity.

        The identity provider owns the profile: name and avatar are refreshed
        from the token claims on every sign-in so they never drift.
        """
        profile = profile_from_claims(payload)

        linked = False
        user = User.objects.filter(supabase_id=supabase_user_id).first()
        if user is None:
            if not email:
                raise AuthenticationFailed("Token missing email claim")

            # Accounts created before the first Supabase login are linked by email
            user = User.objects.filter(email__iexact=email, supabase_id__isnull=True).first()
            if user is None:
                user = User.objects.create(
                    username=self._unique_username(email),
                    email=email,
                    supabase_id=supabase_user_id,
                    **profile,
                )
                user.set_unusable_password()
                user.save(update_fields=["password"])
                logger.info(f"Created new user from Supabase: {email}")
                return user

            user.supabase_id = supabase_user_id
            linked = True

        changed = [field for field, value in profile.items() if value and getattr(user, field) != value]
        for field in changed:
            setattr(user, field, profile[field])
        if linked:
            changed.append("supabase_id")
        if changed:
            user.save(update_fields=changed)

        return user

    @staticmethod
    def _unique_username(email: str) -> str:
        username = email.split("@")[0][:140]
        base_username = username
        counter = 1
        while User.objects.filter(username=username).exists():
            username = f"{base_username}_{counter}"
            counter += 1
        return username
