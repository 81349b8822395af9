import post_board
import ui_board
import main


def test_critical_functions():
    print("🔍 Starting System Integrity Check...")

    # 1. Check Validation Limits
    if post_board.TITLE_MAX_LENGTH != 100 or post_board.CONTENT_MAX_LENGTH != 5000:
        raise AssertionError("❌ Validation Regression: title/content limits changed!")

    # 2. Check Redirect Timing
    if post_board.REDIRECT_DELAY != 1.0:
        raise AssertionError("❌ Board Regression: post-submit redirect delay changed!")

    # 3. Check UI Entry Points
    if not hasattr(ui_board, "render_board_page") or not hasattr(main, "main"):
        raise AssertionError("❌ UI Regression: page entry point missing!")

    print("✅ System Integrity Verified: Core logic is intact.")

if __name__ == "__main__":
    try:
        test_critical_functions()
    except AssertionError as e:
        print(e)
        exit(1)
