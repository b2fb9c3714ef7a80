import os

os.environ.setdefault('SDL_VIDEODRIVER', 'dummy')
os.environ.setdefault('SDL_AUDIODRIVER', 'dummy')

import pygame
import pygame_gui
import pytest

from pygame_gui_terminal.terminal_panel import Terminal

SCREEN_SIZE = (800, 600)


@pytest.fixture(scope='session', autouse=True)
def pygame_display():
    pygame.init()
    pygame.display.set_mode(SCREEN_SIZE)
    yield
    pygame.quit()


@pytest.fixture
def manager():
    pygame.event.clear()
    return pygame_gui.UIManager(SCREEN_SIZE)


@pytest.fixture
def terminal(manager):
    terminal = Terminal(manager)
    terminal.init()
    return terminal


def key_event(key, mod=0, unicode=''):
    return pygame.event.Event(pygame.KEYDOWN, key=key, mod=mod, unicode=unicode)


def entry_texts(terminal):
    return [entry.text for entry in terminal.outputs.entries]
