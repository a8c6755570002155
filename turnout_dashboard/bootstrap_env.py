"""
Bootstrap environment for Streamlit Cloud & local dev:
- Flatten st.secrets into uppercase os.environ keys (nested -> PREFIX_CHILD)
- If GOOGLE_CREDENTIALS_JSON is provided in secrets (dict or JSON string),
  write it to a temp file and set GOOGLE_APPLICATION_CREDENTIALS
- Finally, load .env (without overriding existing env vars)
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from typing import Iterator, Tuple

import streamlit as st
from dotenv import load_dotenv
from loguru import logger


def _sanitize_key(key: str) -> str:
    return re.sub(r"[^A-Za-z0-9_]", "_", key.upper())


def _flatten_secrets(prefix: str, val) -> Iterator[Tuple[str, str]]:
    if isinstance(val, dict):
        for k, v in val.items():
            yield from _flatten_secrets(f"{prefix}_{k}", v)
    else:
        yield _sanitize_key(prefix), str(val)


def _secrets_dict() -> dict:
    # st.secrets raises when no secrets.toml exists outside Streamlit Cloud
    try:
        items = getattr(st, "secrets", None)
        if not items:
            return {}
        return items.to_dict()  # type: ignore[attr-defined]
    except (FileNotFoundError, AttributeError, KeyError):
        return {}
    except Exception as exc:  # streamlit raises its own StreamlitSecretNotFoundError
        logger.debug(f"st.secrets unavailable: {exc}")
        return {}


def _bridge_secrets_to_env() -> None:
    for key, value in _secrets_dict().items():
        if isinstance(value, dict):
            for flat_k, flat_v in _flatten_secrets(key, value):
                os.environ.setdefault(flat_k, flat_v)
        else:
            os.environ.setdefault(_sanitize_key(key), str(value))


def _materialize_google_credentials() -> None:
    """Create a temp service account file from secrets if needed.

    Only relevant when the dataset is read from a Google Sheet.
    """
    existing_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if existing_path and os.path.exists(existing_path):
        return

    creds = _secrets_dict().get("GOOGLE_CREDENTIALS_JSON")
    if not creds:
        return
    if isinstance(creds, dict):
        json_text = json.dumps(creds)
    else:
        try:
            json.loads(str(creds))
        except ValueError:
            logger.warning("GOOGLE_CREDENTIALS_JSON secret is not valid JSON; ignoring it")
            return
        json_text = str(creds)

    tmp_path = os.path.join(tempfile.gettempdir(), "google-credentials.json")
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(json_text)
    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = tmp_path


def ensure_env() -> None:
    """Idempotent: make sure env vars and creds are available.
    Safe to call multiple times, both inside and outside Streamlit runtime.
    """
    _bridge_secrets_to_env()
    _materialize_google_credentials()
    # load_dotenv will not override existing env vars by default
    load_dotenv()


ensure_env()
