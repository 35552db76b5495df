from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict

_EXTRA_MODES = {"allow", "forbid", "ignore"}
_STRICT = {"1", "true", "yes", "on", "strict"}
_LENIENT = {"0", "false", "no", "off", "lenient"}


def _env_extra_mode(default: str = "allow") -> str:
    """
    Read CODESNAP_EXTRA to decide what happens to request fields no model declares.

    allow   keep them, so the success response echoes them back in `data`
    ignore  drop them silently
    forbid  reject the request as malformed
    "strict"/"true"/"1" mean forbid; "lenient"/"false"/"0" mean allow.
    """
    raw = (os.getenv("CODESNAP_EXTRA") or default).strip().lower()
    if raw in _EXTRA_MODES:
        return raw
    if raw in _STRICT:
        return "forbid"
    if raw in _LENIENT:
        return "allow"
    return default


_EXTRA = _env_extra_mode()


class WireModel(BaseModel):
    """
    Base for every request model.

    Unknown keys a newer editor plugin sends are kept by default, since the
    renderer returns the request fields unchanged next to `filepath`. The mode
    is fixed when this module is imported.
    """

    model_config = ConfigDict(extra=_EXTRA, populate_by_name=True)


__all__ = ["WireModel", "_env_extra_mode"]
