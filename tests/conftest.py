import logging

from colorama import Fore, Style, init

init()

logging.basicConfig(level=logging.INFO)

pytest_plugins = ["fixtures.fs", "fixtures.cli", "fixtures.connector"]


def pytest_itemcollected(item):
    """
    Brought in for docstring output:
    https://stackoverflow.com/a/39035226
    """
    par = item.parent.obj
    node = item.obj
    pref = " ".join(par.__doc__.split()) + " " if par.__doc__ else ""
    suf = " ".join(node.__doc__.split()) + " " if node.__doc__ else ""
    if pref or suf:
        item._nodeid = (
            Fore.YELLOW + "".join((pref, suf)) + "\n" + Style.RESET_ALL + item._nodeid
        )
