# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Identity mirrored from the identity provider.

    Rows are created on the first authenticated request (see
    core.supabase_auth); the profile fields are refreshed from the token and
    are read-only everywhere else.
    """

    supabase_id = models.UUIDField(unique=True, null=True, blank=True, help_text="Supabase auth user id (JWT sub)")
    full_name = models.CharField(max_length=255, blank=True, default="")
    avatar_url = models.CharField(max_length=1024, blank=True, default="")

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or self.username

    def __str__(self):
        return self.username
