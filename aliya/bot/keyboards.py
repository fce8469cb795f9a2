from __future__ import annotations

from telegram import ReplyKeyboardMarkup


def main_menu_keyboard() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        [
            ["/diagnose", "/assessment"],
            ["/fitness", "/meal"],
            ["/cycle", "/medication"],
            ["/help", "/cancel"],
        ],
        resize_keyboard=True,
        is_persistent=True,
    )
