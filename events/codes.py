# events/codes.py
"""
Team code generation.

Codes are short, human-friendly and unique across all teams. Uniqueness is
enforced twice: the generator retries against existing rows, and the
`team_code` column carries a unique constraint for the race between two
concurrent generate/insert pairs.
"""
import logging
import secrets
from typing import Callable, Optional

from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import APIException

from core.constants import TEAM_CODE_ALPHABET, TEAM_CODE_MAX_ATTEMPTS
from .models import Team

logger = logging.getLogger('teamreg.events')


class TeamCodeExhausted(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Could not generate a unique team code, please retry."
    default_code = "team_code_exhausted"


class TeamCodeGenerator:
    """Random codes drawn from an unambiguous alphabet."""

    def __init__(self, length: Optional[int] = None, alphabet: str = TEAM_CODE_ALPHABET):
        self.length = length or settings.TEAM_CODE_LENGTH
        self.alphabet = alphabet

    def __call__(self) -> str:
        return ''.join(secrets.choice(self.alphabet) for _ in range(self.length))


def generate_unique_team_code(
    generator: Optional[Callable[[], str]] = None,
    max_attempts: int = TEAM_CODE_MAX_ATTEMPTS,
) -> str:
    """
    Return a code not attached to any existing team.

    Raises TeamCodeExhausted when every attempt collides, which in practice
    only happens with a degenerate generator.
    """
    generator = generator or TeamCodeGenerator()

    for attempt in range(1, max_attempts + 1):
        code = generator()
        if not Team.objects.filter(team_code=code).exists():
            return code
        logger.warning(f"Team code collision on attempt {attempt}: {code}")

    raise TeamCodeExhausted()
