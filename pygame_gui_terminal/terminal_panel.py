import pygame
import pygame_gui
from pygame_gui.core import ObjectID
from pygame_gui.core.interfaces import IContainerLikeInterface
from pygame_gui.elements import UIPanel
from typing import Optional, Dict, Any, Union, Callable
from dataclasses import dataclass

from pygame_gui_terminal.terminal_config import (
    TERMINAL_DEBUG, UI_TERMINAL_COMMAND_PROCESSED, UI_TERMINAL_COMMAND_NOT_FOUND,
    UI_TERMINAL_OUTPUT_ADDED, UI_TERMINAL_OUTPUTS_CLEARED, UI_TERMINAL_VISIBILITY_CHANGED,
    FLAVOUR_LOG, FLAVOUR_INFO, FLAVOUR_WARN, TerminalConfig, TerminalOutputEntry,
    TerminalThemeManager,
)
from pygame_gui_terminal.terminal_regions import TerminalOutputLog, TerminalGutter, TerminalTextArea

TerminalCommand = Callable[[], Any]


@dataclass
class TerminalRegions:
    """Handles to the elements created when a terminal is mounted"""
    element: UIPanel
    outputs: TerminalOutputLog
    gutter: TerminalGutter
    textarea: TerminalTextArea


def layout_terminal_regions(regions: TerminalRegions, config: TerminalConfig):
    """Dock the input row at the bottom of the panel and give the log the rest.

    The text area keeps whatever height it currently has; the gutter is
    matched to it and the output log shrinks or grows to fill the space above.
    """
    layout = config.layout
    inner_width, inner_height = regions.element.get_container().get_rect().size
    padding = layout.panel_padding

    input_height = regions.textarea.rect.height
    input_y = max(padding, inner_height - padding - input_height)
    input_width = max(1, inner_width - 2 * padding - layout.gutter_width)
    output_height = max(layout.min_output_height, input_y - 2 * padding)

    regions.outputs.set_relative_position((padding, padding))
    regions.outputs.set_dimensions((max(1, inner_width - 2 * padding), output_height))

    regions.gutter.set_relative_position((padding, input_y))
    regions.gutter.set_dimensions((layout.gutter_width, input_height))

    regions.textarea.set_relative_position((padding + layout.gutter_width, input_y))
    if regions.textarea.rect.width != input_width:
        regions.textarea.set_dimensions((input_width, input_height))


def build_terminal_regions(mount_point: Optional[IContainerLikeInterface],
                           manager: pygame_gui.UIManager,
                           config: TerminalConfig,
                           theme_manager: TerminalThemeManager,
                           relative_rect: Optional[pygame.Rect] = None,
                           object_id: Union[ObjectID, str, None] = None) -> TerminalRegions:
    """Create the terminal panel and its three regions under mount_point.

    With no mount point the terminal is attached to the manager's root
    container. With no rect the panel fills its mount point.
    """
    if mount_point is None:
        mount_point = manager.get_root_container()

    if relative_rect is None:
        relative_rect = pygame.Rect((0, 0), mount_point.get_container().get_rect().size)

    if isinstance(object_id, str):
        object_id = ObjectID(object_id=object_id, class_id=None)
    elif object_id is None:
        object_id = ObjectID(object_id='#terminal_panel', class_id='@terminal')

    element = UIPanel(relative_rect=relative_rect,
                      manager=manager,
                      container=mount_point,
                      object_id=object_id)

    inner_width, inner_height = element.get_container().get_rect().size
    layout = config.layout
    one_line = layout.line_height + 2 * layout.input_padding

    # Provisional rects; layout_terminal_regions places them properly
    outputs = TerminalOutputLog(pygame.Rect(0, 0, max(1, inner_width), max(1, inner_height - one_line)),
                                manager, theme_manager, config, container=element)
    gutter = TerminalGutter(pygame.Rect(0, 0, layout.gutter_width, one_line),
                            manager, theme_manager, config, container=element)
    textarea = TerminalTextArea(pygame.Rect(layout.gutter_width, 0,
                                            max(1, inner_width - layout.gutter_width), one_line),
                                manager, theme_manager, config, container=element)

    regions = TerminalRegions(element=element, outputs=outputs, gutter=gutter, textarea=textarea)
    layout_terminal_regions(regions, config)
    return regions


class Terminal:
    """Embeddable command console: an output log above a multi-line input with a line gutter.

    Construct it with a manager, then call init() once with the container it
    should live in. Commands are zero-argument callables registered by name.
    """

    def __init__(self, manager: pygame_gui.UIManager,
                 config: TerminalConfig = None,
                 object_id: Union[ObjectID, str, None] = None):
        self.ui_manager = manager
        self.config = config or TerminalConfig()
        self.object_id = object_id

        self.theme_manager = TerminalThemeManager(manager, ['#terminal_panel', 'terminal_panel'],
                                                  self.config.layout.fallback_font_size)

        self.parent: Optional[IContainerLikeInterface] = None
        self.regions: Optional[TerminalRegions] = None
        self.commands: Optional[Dict[str, TerminalCommand]] = None

    def init(self, mount_point: Optional[IContainerLikeInterface] = None,
             relative_rect: Optional[pygame.Rect] = None):
        """Build the terminal under mount_point and start with an empty command registry"""
        self.parent = mount_point
        self.regions = build_terminal_regions(mount_point, self.ui_manager, self.config,
                                              self.theme_manager, relative_rect, self.object_id)
        self.commands = {}

        if self.config.behavior.start_hidden:
            self.regions.element.hide()

        if TERMINAL_DEBUG:
            print(f"Terminal mounted: {self.regions.element.rect}")

    def _require_init(self, operation: str) -> TerminalRegions:
        if self.regions is None:
            raise RuntimeError(f"Terminal.init() must be called before {operation}()")
        return self.regions

    # Region handles

    @property
    def element(self) -> UIPanel:
        return self._require_init('element').element

    @property
    def outputs(self) -> TerminalOutputLog:
        return self._require_init('outputs').outputs

    @property
    def gutter(self) -> TerminalGutter:
        return self._require_init('gutter').gutter

    @property
    def textarea(self) -> TerminalTextArea:
        return self._require_init('textarea').textarea

    def _post_event(self, event_type: int, **event_data):
        event_data['ui_element'] = self.element
        event_data['ui_object_id'] = self.element.most_specific_combined_id
        pygame.event.post(pygame.event.Event(event_type, event_data))

    # Command registry

    def update_commands(self, commands: Dict[str, TerminalCommand]):
        """Merge commands into the registry, replacing any with the same name"""
        self._require_init('update_commands')
        self.commands.update(commands)

    def add_command(self, name: str, command: TerminalCommand):
        self._require_init('add_command')
        self.commands[name] = command

    # Output log

    def echo(self, text: Optional[str] = '', flavour: str = FLAVOUR_LOG,
             scrolling: bool = True, prefixed: bool = False):
        """Append a line of literal text to the output log.

        Blank text is replaced by a non-breaking space so the line keeps its
        height. flavour only selects the colour. Pass scrolling=False to
        batch several lines and scroll once afterwards.
        """
        outputs = self._require_init('echo').outputs
        behavior = self.config.behavior

        text = '' if text is None else str(text)
        if text.strip() == '':
            text = behavior.blank_text
        if prefixed:
            text = behavior.prompt_prefix + text

        # scroll_to_bottom redraws, so the log is only drawn once per echo
        outputs.add_entry(TerminalOutputEntry(text=text, flavour=flavour), redraw=not scrolling)
        if scrolling:
            outputs.scroll_to_bottom()

        self._post_event(UI_TERMINAL_OUTPUT_ADDED, text=text, flavour=flavour)

    def scroll_to_monitor_bottom(self):
        self._require_init('scroll_to_monitor_bottom').outputs.scroll_to_bottom()

    def clear_outputs(self):
        self._require_init('clear_outputs').outputs.clear()
        self._post_event(UI_TERMINAL_OUTPUTS_CLEARED)

    # Input buffer

    def get_text(self, trimming: bool = False, lowercase: bool = False) -> str:
        text = self._require_init('get_text').textarea.text
        if trimming:
            text = text.strip()
        if lowercase:
            text = text.lower()
        return text

    def set_text(self, text: str):
        """Replace the input text; sizes are not recomputed"""
        self._require_init('set_text').textarea.set_text(text)

    def clear_text(self):
        self.set_text('')
        self.auto_resize_all()

    # Sizing

    def auto_resize_textarea(self):
        """Fit the text area height to its content.

        Collapse to one line, then grow to scroll_height. scroll_height is
        never less than the current height, so both steps are needed.
        """
        regions = self._require_init('auto_resize_textarea')
        textarea = regions.textarea
        textarea.set_height(textarea.min_height)
        textarea.set_height(textarea.scroll_height)
        layout_terminal_regions(regions, self.config)

    def auto_resize_gutter(self):
        gutter = self._require_init('auto_resize_gutter').gutter
        value = self.textarea.text
        lines = 1 if value == '' else len(value.split('\n'))
        gutter.set_line_count(lines)

    def auto_resize_all(self):
        self.auto_resize_textarea()
        self.auto_resize_gutter()

    def focus(self):
        """Give keyboard focus to the text area; does nothing while hidden"""
        regions = self._require_init('focus')
        if not regions.element.visible:
            return
        self.ui_manager.set_focus_set(regions.textarea)
        regions.textarea.focus()

    # Commands

    def process_command(self, name: str, echoing: bool = True, clearing: bool = True) -> Any:
        """Run the command registered as name and return its result.

        The input is cleared before the lookup and the name is echoed before
        the command runs. Unknown names are reported in the log and give None.
        """
        self._require_init('process_command')
        if clearing:
            self.clear_text()

        command = self.commands.get(name)
        if command is not None:
            if echoing:
                self.echo(name, prefixed=True)
            result = command()
            self._post_event(UI_TERMINAL_COMMAND_PROCESSED, command=name, result=result)
            return result

        self.echo(self.config.behavior.not_found_message.format(name=name))
        self._post_event(UI_TERMINAL_COMMAND_NOT_FOUND, command=name)
        return None

    def toggle(self, force: Optional[bool] = None) -> bool:
        """Flip the hidden state, or set it to force. Returns True when now hidden.

        Hiding also takes keyboard focus away from the text area.
        """
        regions = self._require_init('toggle')
        element = regions.element
        hidden = bool(element.visible) if force is None else force

        if hidden:
            element.hide()
            if regions.textarea.is_focused:
                self.ui_manager.set_focus_set(None)
                regions.textarea.unfocus()
        else:
            element.show()

        hidden = not element.visible
        self._post_event(UI_TERMINAL_VISIBILITY_CHANGED, hidden=hidden)
        return hidden

    def rebuild_from_changed_theme_data(self):
        """Re-read theme colours and redraw every region"""
        regions = self._require_init('rebuild_from_changed_theme_data')
        self.theme_manager.update_theme()
        regions.outputs.relayout()
        regions.outputs.rebuild_image()
        regions.gutter.rebuild_image()
        regions.textarea.rebuild_image()


def create_default_commands(terminal: Terminal, hotkeys=None) -> Dict[str, TerminalCommand]:
    """The stock 'help' and 'clear' commands"""
    if hotkeys is None:
        hotkeys = [terminal.config.interaction.toggle_hotkey_label]

    def help_command():
        terminal.echo('Showing command list:')
        for name in terminal.commands:
            terminal.echo(f'    {name}', flavour=FLAVOUR_INFO)
        terminal.echo()

        terminal.echo('Showing hotkey list:')
        for name in hotkeys:
            terminal.echo(f'    {name}', flavour=FLAVOUR_WARN)
        terminal.echo()

    def clear_command():
        terminal.clear_outputs()

    return {
        'help': help_command,
        'clear': clear_command
    }
