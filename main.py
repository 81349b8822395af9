import streamlit as st
import logging

import post_store
import secrets_manager
import ui_board

# --- LOGGING SETUP ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# --- 1. CONFIGURATION ---
st.set_page_config(
    page_title="글",
    page_icon="✍️",
    layout="centered",
    initial_sidebar_state="collapsed",
)


@st.cache_resource
def get_post_store(url, anon_key):
    """One Supabase client per process, shared by every session."""
    logger.info("Connecting post store")
    return post_store.PostStore.from_config(post_store.StoreConfig(url=url, anon_key=anon_key))


# --- MAIN LOGIC ---
def main():
    try:
        config = secrets_manager.load_store_config()
    except secrets_manager.ConfigError as e:
        logger.error(f"Startup Config Error: {e}")
        st.error(f"Configuration Error: {e}")
        st.stop()

    store = get_post_store(config.url, config.anon_key)
    tz_name = secrets_manager.get_secret("DISPLAY_TIMEZONE") or ui_board.DEFAULT_TIMEZONE
    ui_board.render_board_page(store, tz_name=tz_name)


if __name__ == "__main__":
    main()
