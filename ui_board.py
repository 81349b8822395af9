import streamlit as st
import asyncio
import html
import logging
import weakref
from datetime import datetime
from zoneinfo import ZoneInfo

import post_board
from post_board import PostBoard, Section, StatusKind

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Seoul"

LOADING_TEXT = "글을 불러오는 중..."
EMPTY_TEXT = "아직 글이 없습니다. 첫 번째 글을 써보세요."

# Controller messages -> page copy
USER_MESSAGES = {
    post_board.MSG_FIELDS_REQUIRED: "제목과 내용을 모두 입력해주세요.",
    post_board.MSG_TITLE_TOO_LONG: f"제목은 {post_board.TITLE_MAX_LENGTH}자 이내로 작성해주세요.",
    post_board.MSG_CONTENT_TOO_LONG: f"내용은 {post_board.CONTENT_MAX_LENGTH}자 이내로 작성해주세요.",
    post_board.MSG_LOAD_FAILED: "글을 불러오는 중 오류가 발생했습니다.",
    post_board.MSG_POST_FAILED: "글 작성 중 오류가 발생했습니다.",
    post_board.MSG_POSTED: "글이 성공적으로 등록되었습니다!",
}

PAGE_CSS = """
<style>
.block-container { max-width: 700px; padding-top: 3rem !important; }
.board-header { margin-bottom: 3rem; text-align: center; }
.board-header h1 { font-family: 'Gowun Batang', serif; font-size: 28px; font-weight: normal; letter-spacing: 2px; }
.board-subtitle { font-size: 14px; color: #666; letter-spacing: 1px; }
.post { margin-bottom: 60px; padding-bottom: 40px; border-bottom: 1px solid #f0f0f0; font-family: 'Gowun Batang', serif; }
.post-title { font-size: 22px; font-weight: 700; color: #222; margin-bottom: 15px; line-height: 1.4; }
.post-meta { font-size: 12px; color: #999; margin-bottom: 25px; letter-spacing: 0.5px; }
.post-content { font-size: 18px; line-height: 1.8; white-space: pre-wrap; word-break: break-word; }
.empty-message { text-align: center; color: #999; font-style: italic; padding: 80px 0; }
#MainMenu {visibility: hidden;}
footer {visibility: hidden;}
</style>
"""


def user_message(status) -> str:
    if not status.message:
        return ""
    return USER_MESSAGES.get(status.message, status.message)


def format_created_at(value: datetime, tz_name=DEFAULT_TIMEZONE) -> str:
    """Formats like ko-KR toLocaleString, e.g. '2024. 5. 1. 오후 7:20:30'."""
    local = value.astimezone(ZoneInfo(tz_name))
    meridiem = "오전" if local.hour < 12 else "오후"
    hour = local.hour % 12 or 12
    return f"{local.year}. {local.month}. {local.day}. {meridiem} {hour}:{local.minute:02d}:{local.second:02d}"


def post_html(post, tz_name=DEFAULT_TIMEZONE) -> str:
    return f"""
    <div class="post">
        <h2 class="post-title">{html.escape(post.title)}</h2>
        <div class="post-meta">{format_created_at(post.created_at, tz_name)}</div>
        <div class="post-content">{html.escape(post.content)}</div>
    </div>
    """


# --- SESSION ---

def get_board(store) -> PostBoard:
    """
    One controller and one event loop per browser session.
    The loop (and the worker threads to_thread starts on it) lives as long
    as the session; it is closed once the session's board is collected.
    """
    if "post_board" not in st.session_state:
        logger.info("Starting board session")
        board = PostBoard(store)
        loop = asyncio.new_event_loop()
        weakref.finalize(board, loop.close)
        st.session_state.post_board = board
        st.session_state.board_loop = loop
    return st.session_state.post_board


def _run(coro):
    return st.session_state.board_loop.run_until_complete(coro)


async def _switch_and_settle(board, target):
    board.switch_section(target)
    await board.settle()


# --- RENDERERS ---

def _render_header():
    st.markdown("""
    <div class="board-header">
        <h1>글</h1>
        <p class="board-subtitle">생각을 나누는 공간</p>
    </div>
    """, unsafe_allow_html=True)


def _render_nav(board):
    active = board.state.active_section
    c1, c2 = st.columns(2)
    with c1:
        if st.button("쓰기", key="nav_write", type="primary" if active is Section.WRITE else "secondary", use_container_width=True):
            _run(_switch_and_settle(board, Section.WRITE))
            # Streamlit drops widget state while the Write inputs are hidden
            st.session_state.reset_draft_widgets = True
            st.rerun()
    with c2:
        if st.button("읽기", key="nav_read", type="primary" if active is Section.READ else "secondary", use_container_width=True):
            with st.spinner(LOADING_TEXT):
                _run(_switch_and_settle(board, Section.READ))
            st.rerun()


def render_write_section(board):
    state = board.state
    if state.status.kind is StatusKind.ERROR:
        st.error(user_message(state.status))
    elif state.status.kind is StatusKind.SUCCESS:
        st.success(user_message(state.status))

    # Widgets own their values; push the controller's draft into them after a clear
    if st.session_state.pop("reset_draft_widgets", False):
        st.session_state.draft_title = state.draft.title
        st.session_state.draft_content = state.draft.content

    title = st.text_input(
        "제목", key="draft_title", max_chars=post_board.TITLE_MAX_LENGTH,
        placeholder="제목을 입력하세요", label_visibility="collapsed",
    )
    content = st.text_area(
        "내용", key="draft_content", height=300,
        placeholder="당신의 생각을 적어보세요...", label_visibility="collapsed",
    )
    board.update_draft("title", title)
    board.update_draft("content", content)

    b1, b2 = st.columns(2)
    with b1:
        if st.button("지우기", use_container_width=True):
            board.clear_draft()
            st.session_state.reset_draft_widgets = True
            st.rerun()
    with b2:
        if st.button("올리기", type="primary", disabled=state.status.is_loading, use_container_width=True):
            status = _run(board.submit_post())
            if status.kind is StatusKind.SUCCESS:
                st.session_state.reset_draft_widgets = True
            st.rerun()


def render_read_section(board, tz_name=DEFAULT_TIMEZONE):
    state = board.state
    if state.status.kind is StatusKind.ERROR:
        st.error(user_message(state.status))

    if state.status.is_loading:
        st.markdown(f'<div class="empty-message">{LOADING_TEXT}</div>', unsafe_allow_html=True)
    elif not state.posts:
        st.markdown(f'<div class="empty-message">{EMPTY_TEXT}</div>', unsafe_allow_html=True)
    else:
        for post in state.posts:
            st.markdown(post_html(post, tz_name), unsafe_allow_html=True)


def render_board_page(store, tz_name=DEFAULT_TIMEZONE):
    board = get_board(store)
    st.markdown(PAGE_CSS, unsafe_allow_html=True)
    _render_header()
    _render_nav(board)
    st.divider()

    if board.state.active_section is Section.WRITE:
        render_write_section(board)
    else:
        render_read_section(board, tz_name)

    # Redirect after posting, or a load still in flight
    if board.has_pending_effects:
        if board.state.active_section is Section.READ:
            with st.spinner(LOADING_TEXT):
                _run(board.settle())
        else:
            _run(board.settle())
        st.rerun()
