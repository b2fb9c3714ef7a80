import pygame
import pygame_gui
from typing import List
from dataclasses import dataclass, field
from enum import Enum
import time

TERMINAL_DEBUG = False

# Define custom pygame-gui events
UI_TERMINAL_COMMAND_PROCESSED = pygame.USEREVENT + 200
UI_TERMINAL_COMMAND_NOT_FOUND = pygame.USEREVENT + 201
UI_TERMINAL_OUTPUT_ADDED = pygame.USEREVENT + 202
UI_TERMINAL_OUTPUTS_CLEARED = pygame.USEREVENT + 203
UI_TERMINAL_TEXT_CHANGED = pygame.USEREVENT + 204
UI_TERMINAL_VISIBILITY_CHANGED = pygame.USEREVENT + 205

# Documented output flavours; any other string is accepted and styled as 'log'
FLAVOUR_LOG = "log"
FLAVOUR_INFO = "info"
FLAVOUR_WARN = "warn"
FLAVOUR_ERROR = "error"


class GutterMarker(Enum):
    """Kinds of line marker drawn in the input gutter"""
    PROMPT = "prompt"
    CONTINUATION = "continuation"


@dataclass
class TerminalLayoutConfig:
    """Layout and spacing configuration for the terminal"""
    # Regions
    panel_padding: int = 6
    gutter_width: int = 28
    min_output_height: int = 16

    # Text rendering
    line_height: int = 18
    output_padding: int = 4
    input_padding: int = 4
    cursor_width: int = 2
    border_width: int = 1

    # Scrolling
    scroll_speed: int = 3

    # Fallback settings
    fallback_font_size: int = 16


@dataclass
class TerminalInteractionConfig:
    """Keyboard configuration used by the default key bindings"""
    submit_key: int = pygame.K_RETURN
    clear_key: int = pygame.K_ESCAPE
    newline_modifier: int = pygame.KMOD_SHIFT

    # Global show/hide hotkey (Control + /)
    toggle_key: int = pygame.K_SLASH
    toggle_modifier: int = pygame.KMOD_CTRL
    toggle_hotkey_label: str = "Control + /"

    enable_toggle_hotkey: bool = True
    enable_clear_key: bool = True

    # Timing
    cursor_blink_rate: float = 0.5


@dataclass
class TerminalBehaviorConfig:
    """Behaviour configuration for the terminal"""
    prompt_prefix: str = "$  "
    prompt_marker: str = "$  "
    continuation_marker: str = "•  "
    blank_text: str = "\u00a0"

    # Submitting from the keyboard
    echo_results: bool = True
    result_prefix: str = "Result: "
    not_found_message: str = "No command found: {name}"

    # Output
    word_wrap: bool = True
    start_hidden: bool = False


@dataclass
class TerminalConfig:
    """Complete configuration for a terminal"""
    layout: TerminalLayoutConfig = field(default_factory=TerminalLayoutConfig)
    interaction: TerminalInteractionConfig = field(default_factory=TerminalInteractionConfig)
    behavior: TerminalBehaviorConfig = field(default_factory=TerminalBehaviorConfig)


@dataclass
class TerminalOutputEntry:
    """Single rendered entry of the output log"""
    text: str
    flavour: str = FLAVOUR_LOG
    timestamp: float = 0

    def __post_init__(self):
        if self.timestamp == 0:
            self.timestamp = time.time()


class TerminalThemeManager:
    """Resolves terminal colours and font from the UI theme"""

    def __init__(self, ui_manager: pygame_gui.UIManager, element_ids: List[str],
                 fallback_font_size: int = 16):
        self.ui_manager = ui_manager
        self.element_ids = element_ids
        self.fallback_font_size = fallback_font_size
        self.themed_colors = {}
        self.themed_font = None
        self._fallback_font = None
        self._update_theme_data()

    def _update_theme_data(self):
        """Update theme-dependent data with fallbacks"""
        color_mappings = {
            'output_bg': pygame.Color(18, 18, 18),
            'input_bg': pygame.Color(24, 24, 24),
            'gutter_bg': pygame.Color(24, 24, 24),
            'text': pygame.Color(220, 220, 220),
            'prompt': pygame.Color(0, 200, 120),
            'continuation': pygame.Color(110, 110, 110),
            'cursor': pygame.Color(235, 235, 235),
            'border': pygame.Color(70, 70, 70),
            'focus_border': pygame.Color(120, 160, 200),
            'log_text': pygame.Color(220, 220, 220),
            'info_text': pygame.Color(100, 200, 255),
            'warn_text': pygame.Color(255, 210, 90),
            'error_text': pygame.Color(255, 100, 100),
        }

        self.themed_colors.clear()
        theme = self.ui_manager.get_theme()

        for color_name, default_color in color_mappings.items():
            try:
                theme_color = theme.get_colour(color_name, self.element_ids)
            except (KeyError, AttributeError, TypeError):
                theme_color = None

            # Gradients and other colour objects are not usable for text rendering
            if not isinstance(theme_color, pygame.Color):
                theme_color = None

            self.themed_colors[color_name] = theme_color if theme_color else default_color

        try:
            self.themed_font = theme.get_font(self.element_ids)
        except (KeyError, AttributeError, TypeError, pygame.error):
            self.themed_font = None

    def get_color(self, color_name: str) -> pygame.Color:
        """Get themed color with fallback"""
        return self.themed_colors.get(color_name, self.themed_colors.get('text', pygame.Color(255, 255, 255)))

    def get_flavour_color(self, flavour: str) -> pygame.Color:
        """Colour for an output flavour; unknown flavours use the plain text colour"""
        return self.themed_colors.get(f"{flavour}_text", self.get_color('text'))

    def get_font(self):
        """Get themed font with fallback"""
        if self.themed_font:
            return self.themed_font
        if self._fallback_font is None:
            self._fallback_font = pygame.font.Font(None, self.fallback_font_size)
        return self._fallback_font

    def update_theme(self):
        """Update theme data (call when theme changes)"""
        self._update_theme_data()


# Default theme for the terminal
TERMINAL_THEME = {
    "terminal_panel": {
        "colours": {
            "output_bg": "#121212",
            "input_bg": "#181818",
            "gutter_bg": "#181818",
            "text": "#dcdcdc",
            "prompt": "#00c878",
            "continuation": "#6e6e6e",
            "cursor": "#ebebeb",
            "border": "#464646",
            "focus_border": "#78a0c8",
            "log_text": "#dcdcdc",
            "info_text": "#64c8ff",
            "warn_text": "#ffd25a",
            "error_text": "#ff6464"
        },
        "font": {
            "name": "courier",
            "size": "14",
            "bold": "0",
            "italic": "0"
        }
    }
}
