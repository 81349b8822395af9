import streamlit as st
import os
import logging

from post_store import StoreConfig

logger = logging.getLogger(__name__)

REQUIRED_STORE_SETTINGS = ("SUPABASE_URL", "SUPABASE_ANON_KEY")


class ConfigError(Exception):
    pass


def get_secret(key_name):
    """
    Smart Secret Fetcher.
    1. Checks os.environ (deployment) - both the literal name and the UPPER_UNDERSCORE form.
    2. Checks st.secrets (.streamlit/secrets.toml for local runs).
    Returns None when the setting is nowhere to be found.
    """

    # --- 1. Environment Variable ---
    # A. Exact Match (e.g. "supabase.url")
    env_val = os.environ.get(key_name)
    if env_val: return env_val

    # B. Standard Env Var Format (e.g. "supabase.url" -> "SUPABASE_URL")
    alt_key = key_name.upper().replace(".", "_")
    env_val = os.environ.get(alt_key)
    if env_val: return env_val

    # --- 2. Streamlit Secrets ---
    try:
        # A. Direct Lookup
        if key_name in st.secrets:
            return st.secrets[key_name]

        # B. [supabase] section
        if "supabase" in st.secrets:
            section = st.secrets["supabase"]
            if key_name == "SUPABASE_URL": return section.get("url")
            if key_name == "SUPABASE_ANON_KEY": return section.get("anon_key") or section.get("key")

        # C. Dot Notation (e.g. "supabase.url")
        if "." in key_name:
            section, key = key_name.split(".", 1)
            if section in st.secrets:
                return st.secrets[section].get(key)

    except Exception as e:
        # No secrets.toml at all is a normal deployment (env only)
        logger.debug(f"st.secrets unavailable for {key_name}: {e}")

    return None


def load_store_config():
    """Both store settings are required; a missing one is a startup error."""
    values = {name: get_secret(name) for name in REQUIRED_STORE_SETTINGS}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigError(f"Missing settings: {', '.join(missing)}")
    return StoreConfig(url=values["SUPABASE_URL"], anon_key=values["SUPABASE_ANON_KEY"])
