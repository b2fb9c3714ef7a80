import pygame
import pytest

from pygame_gui_terminal.terminal_config import UI_TERMINAL_TEXT_CHANGED, GutterMarker
from pygame_gui_terminal.terminal_regions import text_width

from conftest import key_event


def test_get_text_transforms_are_read_only(terminal):
    terminal.set_text('  Hello World  ')

    assert terminal.get_text() == '  Hello World  '
    assert terminal.get_text(trimming=True) == 'Hello World'
    assert terminal.get_text(lowercase=True) == '  hello world  '
    assert terminal.get_text(trimming=True, lowercase=True) == 'hello world'
    assert terminal.get_text() == '  Hello World  '


def test_set_text_does_not_resize(terminal):
    height = terminal.textarea.rect.height
    pygame.event.clear()

    terminal.set_text('one\ntwo\nthree')

    assert terminal.get_text() == 'one\ntwo\nthree'
    assert len(terminal.gutter.markers) == 1
    assert terminal.textarea.rect.height == height
    assert pygame.event.get(UI_TERMINAL_TEXT_CHANGED) == []


def test_clear_text_leaves_one_marker(terminal):
    terminal.set_text('a\nb\nc\nd')
    terminal.auto_resize_all()
    assert len(terminal.gutter.markers) == 4

    terminal.clear_text()

    assert terminal.get_text() == ''
    assert terminal.gutter.markers == [GutterMarker.PROMPT]


@pytest.mark.parametrize('text', ['', 'x', '\n', 'a\nb', 'a\n\n', '\n\n\n', 'trailing\n'])
def test_gutter_matches_line_count(terminal, text):
    terminal.set_text(text)
    terminal.auto_resize_gutter()
    assert len(terminal.gutter.markers) == max(1, text.count('\n') + 1)


def test_hello_world_gutter(terminal):
    terminal.set_text('hello\nworld')
    terminal.auto_resize_all()

    assert terminal.gutter.markers == [GutterMarker.PROMPT, GutterMarker.CONTINUATION]
    assert terminal.gutter.marker_text == '$  \n•  \n'


def test_textarea_grows_and_shrinks(terminal):
    textarea = terminal.textarea
    layout = terminal.config.layout
    one_line = textarea.min_height
    output_height = terminal.outputs.rect.height

    terminal.set_text('a\nb\nc')
    terminal.auto_resize_textarea()

    assert textarea.rect.height == 3 * layout.line_height + 2 * layout.input_padding
    assert terminal.gutter.rect.height == textarea.rect.height
    assert terminal.outputs.rect.height < output_height

    terminal.clear_text()

    assert textarea.rect.height == one_line
    assert terminal.outputs.rect.height == output_height


def test_scroll_height_never_reports_less_than_current_height(terminal):
    textarea = terminal.textarea
    terminal.set_text('a\nb\nc\nd')
    terminal.auto_resize_textarea()
    tall = textarea.rect.height

    terminal.set_text('a')
    assert textarea.scroll_height == tall

    terminal.auto_resize_textarea()
    assert textarea.rect.height == textarea.min_height


def test_input_row_sits_below_the_log(terminal):
    outputs, gutter, textarea = terminal.outputs, terminal.gutter, terminal.textarea

    assert gutter.rect.top == textarea.rect.top
    assert gutter.rect.right == textarea.rect.left
    assert outputs.rect.bottom <= textarea.rect.top


def test_typing_inserts_and_posts_changes(terminal):
    textarea = terminal.textarea
    textarea.focus()
    pygame.event.clear()

    for char in 'hi':
        assert textarea.process_event(key_event(getattr(pygame, f'K_{char}'), unicode=char))

    assert terminal.get_text() == 'hi'
    changes = pygame.event.get(UI_TERMINAL_TEXT_CHANGED)
    assert [e.text for e in changes] == ['h', 'hi']
    assert all(e.ui_element is textarea for e in changes)


def test_shift_enter_inserts_newline(terminal):
    textarea = terminal.textarea
    textarea.focus()
    terminal.set_text('first')

    assert textarea.process_event(key_event(pygame.K_RETURN, mod=pygame.KMOD_LSHIFT))
    assert terminal.get_text() == 'first\n'


def test_plain_enter_and_escape_are_left_to_bindings(terminal):
    textarea = terminal.textarea
    textarea.focus()
    terminal.set_text('ping')

    assert not textarea.process_event(key_event(pygame.K_RETURN))
    assert not textarea.process_event(key_event(pygame.K_ESCAPE, unicode='\x1b'))
    assert terminal.get_text() == 'ping'


def test_editing_keys(terminal):
    textarea = terminal.textarea
    textarea.focus()
    terminal.set_text('abc\ndef')

    textarea.process_event(key_event(pygame.K_BACKSPACE))
    assert terminal.get_text() == 'abc\nde'

    textarea.process_event(key_event(pygame.K_HOME))
    assert textarea.cursor_pos == 4

    textarea.process_event(key_event(pygame.K_LEFT))
    textarea.process_event(key_event(pygame.K_DELETE))
    assert terminal.get_text() == 'abcde'

    textarea.process_event(key_event(pygame.K_END))
    assert textarea.cursor_pos == 5


def test_unfocused_textarea_ignores_keys(terminal):
    textarea = terminal.textarea
    textarea.unfocus()

    assert not textarea.process_event(key_event(pygame.K_a, unicode='a'))
    assert terminal.get_text() == ''


def test_control_chords_are_not_typed(terminal):
    textarea = terminal.textarea
    textarea.focus()

    assert not textarea.process_event(key_event(pygame.K_SLASH, mod=pygame.KMOD_LCTRL, unicode='/'))
    assert terminal.get_text() == ''


def test_long_line_scrolls_sideways_to_keep_cursor_visible(terminal):
    textarea = terminal.textarea
    textarea.focus()
    terminal.set_text('x' * 400)

    font = terminal.theme_manager.get_font()
    padding = terminal.config.layout.input_padding
    cursor_x = padding + text_width(font, 'x' * 400) - textarea.scroll_x
    assert textarea.scroll_x > 0
    assert cursor_x + terminal.config.layout.cursor_width <= textarea.rect.width

    textarea.process_event(key_event(pygame.K_HOME))
    assert textarea.scroll_x == 0


def test_short_text_is_not_scrolled_sideways(terminal):
    terminal.set_text('help')
    assert terminal.textarea.scroll_x == 0

    terminal.set_text('x' * 400)
    terminal.clear_text()
    assert terminal.textarea.scroll_x == 0


def test_textarea_border_follows_focus(terminal):
    textarea = terminal.textarea
    theme = terminal.theme_manager

    textarea.unfocus()
    assert textarea.image.get_at((0, 0)) == theme.get_color('border')

    textarea.focus()
    assert textarea.image.get_at((0, 0)) == theme.get_color('focus_border')
