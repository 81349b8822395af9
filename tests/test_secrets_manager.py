import pytest
from unittest.mock import patch, MagicMock
import os

import secrets_manager
from secrets_manager import ConfigError, get_secret, load_store_config


def _st_with(secrets):
    mock_st = MagicMock()
    mock_st.secrets = secrets
    return mock_st


# 1. TEST: Environment wins over secrets.toml
@patch.dict(os.environ, {"SUPABASE_URL": "https://env.supabase.co"}, clear=True)
def test_env_var_takes_priority():
    with patch.object(secrets_manager, "st", _st_with({"supabase": {"url": "https://toml.supabase.co"}})):
        assert get_secret("SUPABASE_URL") == "https://env.supabase.co"


# 2. TEST: Dot names fall back to UPPER_UNDERSCORE env vars
@patch.dict(os.environ, {"SUPABASE_ANON_KEY": "anon-from-env"}, clear=True)
def test_dot_name_maps_to_env_var():
    with patch.object(secrets_manager, "st", _st_with({})):
        assert get_secret("supabase.anon_key") == "anon-from-env"


# 3. TEST: [supabase] section mapping, including the legacy "key" name
@patch.dict(os.environ, {}, clear=True)
def test_supabase_section_mapping():
    section = {"url": "https://toml.supabase.co", "key": "legacy-anon"}
    with patch.object(secrets_manager, "st", _st_with({"supabase": section})):
        assert get_secret("SUPABASE_URL") == "https://toml.supabase.co"
        assert get_secret("SUPABASE_ANON_KEY") == "legacy-anon"
        assert get_secret("supabase.url") == "https://toml.supabase.co"


@patch.dict(os.environ, {}, clear=True)
def test_direct_secret_lookup():
    with patch.object(secrets_manager, "st", _st_with({"DISPLAY_TIMEZONE": "UTC"})):
        assert get_secret("DISPLAY_TIMEZONE") == "UTC"


# 4. TEST: Missing secrets.toml is not an error on its own
@patch.dict(os.environ, {}, clear=True)
def test_unreadable_secrets_returns_none():
    broken = MagicMock()
    broken.__contains__.side_effect = FileNotFoundError("no secrets.toml")
    with patch.object(secrets_manager, "st", _st_with(broken)):
        assert get_secret("SUPABASE_URL") is None


# 5. TEST: Startup config
@patch.dict(os.environ, {"SUPABASE_URL": "https://x.supabase.co", "SUPABASE_ANON_KEY": "anon"}, clear=True)
def test_load_store_config():
    with patch.object(secrets_manager, "st", _st_with({})):
        config = load_store_config()
    assert config.url == "https://x.supabase.co"
    assert config.anon_key == "anon"


@patch.dict(os.environ, {"SUPABASE_URL": "https://x.supabase.co"}, clear=True)
def test_load_store_config_names_missing_setting():
    with patch.object(secrets_manager, "st", _st_with({})):
        with pytest.raises(ConfigError, match="SUPABASE_ANON_KEY"):
            load_store_config()
