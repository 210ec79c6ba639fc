"""Form engine settings.

Priority chain (highest to lowest):
  1. Init kwargs passed by the caller
  2. ``FORMSTATE_*`` environment variables
  3. Code defaults

Uses Pydantic Settings v2.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from formstate.types import TypingScope

DEFAULT_TYPING_DELAY_MS = 1500


class FormSettings(BaseSettings):
    """Tunables shared by every form a controller builds.

    Attributes:
        typing_delay_ms: Quiet period after the last edit before errors show.
        typing_scope: ``field`` to suppress errors only on the edited field,
            ``form`` to suppress every field's error on any edit.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "FORMSTATE_",
    }

    typing_delay_ms: int = Field(default=DEFAULT_TYPING_DELAY_MS, ge=0)
    typing_scope: TypingScope = TypingScope.FIELD


__all__ = [
    "FormSettings",
    "DEFAULT_TYPING_DELAY_MS",
]
