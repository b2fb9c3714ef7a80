import pygame
import pygame_gui

from pygame_gui_terminal.terminal_config import (
    TERMINAL_THEME, UI_TERMINAL_COMMAND_PROCESSED, UI_TERMINAL_VISIBILITY_CHANGED,
)
from pygame_gui_terminal.terminal_panel import Terminal, create_default_commands
from pygame_gui_terminal.terminal_bindings import TerminalKeyBindings

DEMO_DEBUG = False


def main():
    """Example page hosting a terminal"""
    pygame.init()
    screen = pygame.display.set_mode((900, 600))
    pygame.display.set_caption("Terminal Demo")
    clock = pygame.time.Clock()

    manager = pygame_gui.UIManager((900, 600), TERMINAL_THEME)

    # Page content the terminal is mounted into
    content = pygame_gui.elements.UIPanel(
        relative_rect=pygame.Rect(40, 40, 820, 520),
        manager=manager,
        object_id='#content'
    )

    terminal = Terminal(manager)
    terminal.init(content)

    terminal.update_commands(create_default_commands(terminal))
    terminal.update_commands({
        'ping': lambda: 'pong',
        'size': lambda: f"{terminal.element.rect.width}x{terminal.element.rect.height}",
    })

    bindings = TerminalKeyBindings(terminal)

    terminal.process_command('help', echoing=False)
    terminal.focus()

    running = True
    while running:
        time_delta = clock.tick(60) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False

            elif event.type == UI_TERMINAL_COMMAND_PROCESSED:
                if DEMO_DEBUG:
                    print(f"Command processed: {event.command} -> {event.result!r}")

            elif event.type == UI_TERMINAL_VISIBILITY_CHANGED:
                if DEMO_DEBUG:
                    print(f"Terminal hidden: {event.hidden}")

            if not bindings.process_event(event):
                manager.process_events(event)

        manager.update(time_delta)

        screen.fill((40, 40, 40))
        manager.draw_ui(screen)
        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    main()
