import pygame

from pygame_gui_terminal.terminal_config import TERMINAL_DEBUG, UI_TERMINAL_TEXT_CHANGED, FLAVOUR_ERROR
from pygame_gui_terminal.terminal_panel import Terminal


class TerminalKeyBindings:
    """Default keyboard wiring for a Terminal.

    Feed every pygame event through process_event() before handing it to the
    UI manager:

    - Enter submits the input as a command name; Shift+Enter is left to the
      text area, which inserts a newline
    - Escape clears the input
    - the toggle hotkey (Control + / by default) shows or hides the terminal
      and focuses it when it becomes visible
    - text changes resize the input row and keep the log scrolled down
    """

    def __init__(self, terminal: Terminal):
        self.terminal = terminal

    @property
    def interaction(self):
        return self.terminal.config.interaction

    def process_event(self, event: pygame.event.Event) -> bool:
        """Handle an event; returns True when it was consumed"""
        if event.type == UI_TERMINAL_TEXT_CHANGED:
            if getattr(event, 'ui_element', None) is not self.terminal.textarea:
                return False
            self.terminal.auto_resize_all()
            self.terminal.scroll_to_monitor_bottom()
            return True

        if event.type != pygame.KEYDOWN:
            return False

        if self._is_toggle_hotkey(event):
            hidden = self.terminal.toggle()
            if not hidden:
                self.terminal.focus()
            return True

        # Keys only reach a visible, focused terminal
        if not (self.terminal.element.visible and self.terminal.textarea.is_focused):
            return False

        if event.key in (self.interaction.submit_key, pygame.K_KP_ENTER):
            if event.mod & self.interaction.newline_modifier:
                return False
            self.submit()
            return True

        elif event.key == self.interaction.clear_key and self.interaction.enable_clear_key:
            self.terminal.clear_text()
            return True

        return False

    def _is_toggle_hotkey(self, event: pygame.event.Event) -> bool:
        return (self.interaction.enable_toggle_hotkey and
                event.key == self.interaction.toggle_key and
                bool(event.mod & self.interaction.toggle_modifier))

    def submit(self):
        """Run the current input as a command and echo any result"""
        command = self.terminal.get_text()
        if command == '':
            return

        behavior = self.terminal.config.behavior
        try:
            result = self.terminal.process_command(command)
        except Exception as e:
            self.terminal.echo(f"Error: {e}", flavour=FLAVOUR_ERROR)
            if TERMINAL_DEBUG:
                print(f"Command '{command}' raised {type(e).__name__}: {e}")
            return

        if result is not None and behavior.echo_results:
            self.terminal.echo(f"{behavior.result_prefix}{result}")
