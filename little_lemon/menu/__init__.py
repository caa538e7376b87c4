from little_lemon.menu.controller import MenuController
from little_lemon.menu.models import MenuItem
from little_lemon.menu.remote import fetch_menu, load_remote_menu
from little_lemon.menu.store import MenuStore

__all__ = [
    "MenuController",
    "MenuItem",
    "MenuStore",
    "fetch_menu",
    "load_remote_menu",
]
