import pygame
import pygame_gui
from pygame_gui.core import UIElement, ObjectID
from pygame_gui.core.interfaces import IContainerLikeInterface
from typing import List, Optional, Dict, Union, Tuple
import time

from pygame_gui_terminal.terminal_config import (
    TERMINAL_DEBUG, UI_TERMINAL_TEXT_CHANGED, GutterMarker, TerminalConfig,
    TerminalOutputEntry, TerminalThemeManager,
)


def _resolve_object_id(object_id: Union[ObjectID, str, None], default: str) -> ObjectID:
    if isinstance(object_id, ObjectID):
        return object_id
    elif isinstance(object_id, str):
        return ObjectID(object_id=object_id, class_id=None)
    return ObjectID(object_id=default, class_id=None)


# Characters pygame fonts refuse to render
_UNRENDERABLE = {ord('\x00'): '\ufffd'}


def displayable_text(text: str) -> str:
    """Text with characters the font cannot draw replaced"""
    return text.translate(_UNRENDERABLE)


def text_width(font, text: str) -> int:
    """Pixel width of text, with a rough fallback for fonts without size()"""
    if hasattr(font, 'size'):
        try:
            return font.size(displayable_text(text))[0]
        except (ValueError, pygame.error):
            pass
    return len(text) * 8


def render_text(font, text: str, color: pygame.Color) -> Optional[pygame.Surface]:
    """Render a single line of literal text; None when there is nothing drawable"""
    text = displayable_text(text)
    if not text:
        return None
    try:
        if hasattr(font, 'render_premul'):
            return font.render_premul(text, color)
        return font.render(text, True, color)
    except (ValueError, pygame.error):
        if TERMINAL_DEBUG:
            print(f"Could not render line: {text!r}")
        return None


def wrap_text(text: str, font, max_width: int) -> List[str]:
    """Split text on newlines and word-wrap each line to max_width"""
    lines = []
    for raw_line in text.split('\n'):
        if max_width <= 0 or text_width(font, raw_line) <= max_width:
            lines.append(raw_line)
            continue

        current_line = ""
        for word in raw_line.split(' '):
            test_line = current_line + (" " if current_line else "") + word
            if text_width(font, test_line) <= max_width:
                current_line = test_line
            elif current_line:
                lines.append(current_line)
                current_line = word
            else:
                lines.append(word)  # Word too long, add anyway
        if current_line:
            lines.append(current_line)

    return lines


def draw_border(surface: pygame.Surface, color: pygame.Color, width: int):
    if width > 0:
        pygame.draw.rect(surface, color, surface.get_rect(), width)


class TerminalOutputLog(UIElement):
    """Scrollable log of rendered output entries.

    Entries are wrapped once, when added. The wrapped lines are kept and only
    recomputed when the wrap width or the font changes.
    """

    def __init__(self, relative_rect: pygame.Rect,
                 manager: pygame_gui.UIManager,
                 theme_manager: TerminalThemeManager,
                 config: TerminalConfig,
                 container: IContainerLikeInterface = None,
                 object_id: Union[ObjectID, str, None] = None,
                 anchors: Dict[str, str] = None):

        self._object_id = _resolve_object_id(object_id, '#terminal_outputs')
        super().__init__(relative_rect, manager, container,
                         starting_height=1, layer_thickness=1,
                         anchors=anchors, object_id=self._object_id)

        self.config = config
        self.theme_manager = theme_manager

        self.entries: List[TerminalOutputEntry] = []
        self.scroll_y = 0

        # Wrapped (text, flavour) lines for all entries, and the width they were wrapped to
        self._lines: List[Tuple[str, str]] = []
        self._wrap_width = self._current_wrap_width()

        self.image = pygame.Surface(self.rect.size).convert()
        self.rebuild_image()

    def _current_wrap_width(self) -> int:
        if not self.config.behavior.word_wrap:
            return 0
        return max(1, self.rect.width - 2 * self.config.layout.output_padding)

    def _wrap_entry(self, entry: TerminalOutputEntry, font) -> List[Tuple[str, str]]:
        return [(line, entry.flavour) for line in wrap_text(entry.text, font, self._wrap_width)]

    def relayout(self):
        """Re-wrap every entry for the current width and font"""
        font = self.theme_manager.get_font()
        self._wrap_width = self._current_wrap_width()
        self._lines = []
        for entry in self.entries:
            self._lines.extend(self._wrap_entry(entry, font))
        self.scroll_y = min(self.scroll_y, self.max_scroll_y)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def content_height(self) -> int:
        layout = self.config.layout
        return len(self._lines) * layout.line_height + 2 * layout.output_padding

    @property
    def max_scroll_y(self) -> int:
        return max(0, self.content_height - self.rect.height)

    def add_entry(self, entry: TerminalOutputEntry, redraw: bool = True):
        """Append an entry; the scroll offset is left alone"""
        self.entries.append(entry)
        self._lines.extend(self._wrap_entry(entry, self.theme_manager.get_font()))
        if redraw:
            self.rebuild_image()

    def clear(self):
        """Remove every entry"""
        self.entries.clear()
        self._lines = []
        self.scroll_y = 0
        self.rebuild_image()

    def scroll_to_bottom(self):
        """Scroll so the newest entry is fully visible"""
        self.scroll_y = self.max_scroll_y
        self.rebuild_image()

    def scroll_by(self, amount: int):
        self.scroll_y = max(0, min(self.max_scroll_y, self.scroll_y + amount))
        self.rebuild_image()

    def set_dimensions(self, dimensions, clamp_to_container: bool = False):
        super().set_dimensions(dimensions, clamp_to_container)
        self.image = pygame.Surface((max(1, self.rect.width), max(1, self.rect.height))).convert()
        if self._current_wrap_width() != self._wrap_width:
            self.relayout()
        self.scroll_y = min(self.scroll_y, self.max_scroll_y)
        self.rebuild_image()

    def rebuild_image(self):
        """Redraw the visible part of the log"""
        self.image.fill(self.theme_manager.get_color('output_bg'))

        font = self.theme_manager.get_font()
        line_height = self.config.layout.line_height
        padding = self.config.layout.output_padding

        # Only the lines that intersect the view
        first = max(0, (self.scroll_y - padding) // line_height)
        last = min(len(self._lines), (self.scroll_y + self.rect.height - padding) // line_height + 1)

        for i in range(first, last):
            line, flavour = self._lines[i]
            y_pos = padding + i * line_height - self.scroll_y
            text_surface = render_text(font, line, self.theme_manager.get_flavour_color(flavour))
            if text_surface is not None:
                self.image.blit(text_surface, (padding, y_pos))

        draw_border(self.image, self.theme_manager.get_color('border'), self.config.layout.border_width)

    def process_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEWHEEL and self.hovered:
            self.scroll_by(-event.y * self.config.layout.scroll_speed * self.config.layout.line_height)
            return True
        return False

    def rebuild_from_changed_theme_data(self):
        self.theme_manager.update_theme()
        self.relayout()
        self.rebuild_image()



class TerminalGutter(UIElement):
    """Strip of line markers drawn beside the text area"""

    def __init__(self, relative_rect: pygame.Rect,
                 manager: pygame_gui.UIManager,
                 theme_manager: TerminalThemeManager,
                 config: TerminalConfig,
                 container: IContainerLikeInterface = None,
                 object_id: Union[ObjectID, str, None] = None,
                 anchors: Dict[str, str] = None):

        self._object_id = _resolve_object_id(object_id, '#terminal_gutter')
        super().__init__(relative_rect, manager, container,
                         starting_height=1, layer_thickness=1,
                         anchors=anchors, object_id=self._object_id)

        self.config = config
        self.theme_manager = theme_manager
        self.markers: List[GutterMarker] = [GutterMarker.PROMPT]

        self.image = pygame.Surface(self.rect.size).convert()
        self.rebuild_image()

    @property
    def marker_text(self) -> str:
        """Markers as they are drawn, one per line"""
        symbols = {
            GutterMarker.PROMPT: self.config.behavior.prompt_marker,
            GutterMarker.CONTINUATION: self.config.behavior.continuation_marker,
        }
        return ''.join(symbols[marker] + '\n' for marker in self.markers)

    def set_line_count(self, count: int):
        """One prompt marker followed by count - 1 continuation markers"""
        count = max(1, count)
        self.markers = [GutterMarker.PROMPT] + [GutterMarker.CONTINUATION] * (count - 1)
        self.rebuild_image()

    def set_dimensions(self, dimensions, clamp_to_container: bool = False):
        super().set_dimensions(dimensions, clamp_to_container)
        self.image = pygame.Surface((max(1, self.rect.width), max(1, self.rect.height))).convert()
        self.rebuild_image()

    def rebuild_image(self):
        self.image.fill(self.theme_manager.get_color('gutter_bg'))

        font = self.theme_manager.get_font()
        line_height = self.config.layout.line_height
        padding = self.config.layout.input_padding

        for i, line in enumerate(self.marker_text.split('\n')[:-1]):
            if self.markers[i] == GutterMarker.PROMPT:
                color = self.theme_manager.get_color('prompt')
            else:
                color = self.theme_manager.get_color('continuation')

            text_surface = render_text(font, line, color)
            if text_surface is not None:
                self.image.blit(text_surface, (padding, padding + i * line_height))

    def rebuild_from_changed_theme_data(self):
        self.theme_manager.update_theme()
        self.rebuild_image()


class TerminalTextArea(UIElement):
    """Multi-line text input surface"""

    def __init__(self, relative_rect: pygame.Rect,
                 manager: pygame_gui.UIManager,
                 theme_manager: TerminalThemeManager,
                 config: TerminalConfig,
                 container: IContainerLikeInterface = None,
                 object_id: Union[ObjectID, str, None] = None,
                 anchors: Dict[str, str] = None):

        self._object_id = _resolve_object_id(object_id, '#terminal_textarea')
        super().__init__(relative_rect, manager, container,
                         starting_height=1, layer_thickness=1,
                         anchors=anchors, object_id=self._object_id)

        self.config = config
        self.theme_manager = theme_manager

        self._text = ""
        self.cursor_pos = 0
        self.is_focused = False

        # Horizontal offset of the drawn text, in pixels
        self.scroll_x = 0

        # Cursor blinking
        self.cursor_visible = True
        self.last_cursor_blink = 0

        self.image = pygame.Surface(self.rect.size).convert()
        self.rebuild_image()

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str):
        """Replace the contents; no change event is posted"""
        self._text = text
        self.cursor_pos = len(text)
        self.rebuild_image()

    @property
    def line_count(self) -> int:
        return len(self._text.split('\n'))

    @property
    def min_height(self) -> int:
        """Height of a single empty line"""
        layout = self.config.layout
        return layout.line_height + 2 * layout.input_padding

    @property
    def scroll_height(self) -> int:
        """Natural height of the content, never less than the current height"""
        layout = self.config.layout
        content_height = self.line_count * layout.line_height + 2 * layout.input_padding
        return max(self.rect.height, content_height)

    def set_height(self, height: int):
        self.set_dimensions((self.rect.width, height))

    def set_dimensions(self, dimensions, clamp_to_container: bool = False):
        super().set_dimensions(dimensions, clamp_to_container)
        self.image = pygame.Surface((max(1, self.rect.width), max(1, self.rect.height))).convert()
        self.rebuild_image()

    def focus(self):
        was_focused = self.is_focused
        super().focus()
        self.is_focused = True
        if not was_focused:
            self.cursor_visible = True
            self.rebuild_image()

    def unfocus(self):
        was_focused = self.is_focused
        super().unfocus()
        self.is_focused = False
        if was_focused:
            self.rebuild_image()

    def _post_text_changed(self):
        event_data = {
            'text': self._text,
            'ui_element': self,
            'ui_object_id': self.most_specific_combined_id
        }
        pygame.event.post(pygame.event.Event(UI_TERMINAL_TEXT_CHANGED, event_data))

    def insert_text(self, text: str):
        """Insert text at the cursor, as if typed"""
        self._text = self._text[:self.cursor_pos] + text + self._text[self.cursor_pos:]
        self.cursor_pos += len(text)
        self.rebuild_image()
        self._post_text_changed()

    def _handle_backspace(self):
        if self.cursor_pos > 0:
            self._text = self._text[:self.cursor_pos - 1] + self._text[self.cursor_pos:]
            self.cursor_pos -= 1
            self.rebuild_image()
            self._post_text_changed()

    def _handle_delete(self):
        if self.cursor_pos < len(self._text):
            self._text = self._text[:self.cursor_pos] + self._text[self.cursor_pos + 1:]
            self.rebuild_image()
            self._post_text_changed()

    def _move_cursor(self, position: int):
        self.cursor_pos = max(0, min(len(self._text), position))
        self.cursor_visible = True
        self.rebuild_image()

    def process_event(self, event: pygame.event.Event) -> bool:
        """Text editing keys; Enter and Escape are left to the key bindings"""
        if event.type != pygame.KEYDOWN or not self.is_focused:
            return False

        key = event.key
        mods = event.mod

        if key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if mods & self.config.interaction.newline_modifier:
                self.insert_text('\n')
                return True
            return False

        elif key == pygame.K_BACKSPACE:
            self._handle_backspace()
            return True

        elif key == pygame.K_DELETE:
            self._handle_delete()
            return True

        elif key == pygame.K_LEFT:
            self._move_cursor(self.cursor_pos - 1)
            return True

        elif key == pygame.K_RIGHT:
            self._move_cursor(self.cursor_pos + 1)
            return True

        elif key == pygame.K_HOME:
            self._move_cursor(self._text.rfind('\n', 0, self.cursor_pos) + 1)
            return True

        elif key == pygame.K_END:
            line_end = self._text.find('\n', self.cursor_pos)
            self._move_cursor(len(self._text) if line_end == -1 else line_end)
            return True

        elif (event.unicode and event.unicode.isprintable() and
              not (mods & (pygame.KMOD_CTRL | pygame.KMOD_ALT))):
            self.insert_text(event.unicode)
            return True

        return False

    def _update_scroll_x(self, font):
        """Shift the view sideways so the cursor stays inside the text area"""
        padding = self.config.layout.input_padding
        line_start = self._text.rfind('\n', 0, self.cursor_pos) + 1
        cursor_offset = text_width(font, self._text[line_start:self.cursor_pos])
        visible_width = max(1, self.rect.width - 2 * padding - self.config.layout.cursor_width)

        if cursor_offset - self.scroll_x > visible_width:
            self.scroll_x = cursor_offset - visible_width
        elif cursor_offset < self.scroll_x:
            self.scroll_x = cursor_offset
        return cursor_offset

    def rebuild_image(self):
        self.image.fill(self.theme_manager.get_color('input_bg'))

        font = self.theme_manager.get_font()
        line_height = self.config.layout.line_height
        padding = self.config.layout.input_padding
        text_color = self.theme_manager.get_color('text')

        cursor_offset = self._update_scroll_x(font)
        text_x = padding - self.scroll_x

        for i, line in enumerate(self._text.split('\n')):
            text_surface = render_text(font, line, text_color)
            if text_surface is not None:
                self.image.blit(text_surface, (text_x, padding + i * line_height))

        if self.is_focused and self.cursor_visible:
            cursor_y = padding + self._text.count('\n', 0, self.cursor_pos) * line_height
            cursor_rect = pygame.Rect(text_x + cursor_offset, cursor_y, self.config.layout.cursor_width, line_height)
            pygame.draw.rect(self.image, self.theme_manager.get_color('cursor'), cursor_rect)

        border_color = self.theme_manager.get_color('focus_border' if self.is_focused else 'border')
        draw_border(self.image, border_color, self.config.layout.border_width)

    def update(self, time_delta: float):
        """Blink the cursor while focused"""
        super().update(time_delta)

        current_time = time.time()
        if current_time - self.last_cursor_blink > self.config.interaction.cursor_blink_rate:
            self.cursor_visible = not self.cursor_visible
            self.last_cursor_blink = current_time
            if self.is_focused:
                self.rebuild_image()

    def rebuild_from_changed_theme_data(self):
        self.theme_manager.update_theme()
        self.rebuild_image()

        if TERMINAL_DEBUG:
            print(f"TerminalTextArea theme rebuilt: {self.rect.size}")
