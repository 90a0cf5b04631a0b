from __future__ import annotations

"""Application-level configuration helpers (env → Options).

Options are read once at startup. A bad value is fatal: ``load_options``
raises ConfigError and the application refuses to boot rather than serve
routes under a half-valid prefix.
"""

# Standard library
import os
from typing import List, Optional

from fragment.models import Options, Validation
from fragment.utils.errors import ConfigError
from fragment.utils.utils import get_env_bool

__all__ = ["RATE_LIMIT", "validate_options", "load_options"]

RATE_LIMIT: str = os.getenv("FRAGMENT_RATE_LIMIT", "600/minute")

_PREFIX_PATH = ["Options", "Sources", "rest", "Prefix"]


def validate_options(options: Options) -> List[Validation]:
    """Return every violation found in *options* (empty when valid)."""
    violations: List[Validation] = []
    prefix = options.prefix
    if prefix:
        if not prefix.startswith("/"):
            violations.append(
                Validation(message="Source prefix must start with a '/'", path=list(_PREFIX_PATH))
            )
        if prefix.endswith("/"):
            violations.append(
                Validation(message="Source prefix must not end with a '/'", path=list(_PREFIX_PATH))
            )
    return violations


def load_options(options: Optional[Options] = None) -> Options:
    """Build Options from the environment (unless given) and validate them."""
    if options is None:
        options = Options(
            prefix=os.getenv("FRAGMENT_PREFIX", ""),
            show_meta=get_env_bool("FRAGMENT_SHOW_META", True),
            show_data=get_env_bool("FRAGMENT_SHOW_DATA", True),
        )

    violations = validate_options(options)
    if violations:
        raise ConfigError(validations=violations)
    return options
