from colorama import Fore, Style

from velocity_broadcast.formatting import colorize, strip_codes, to_ansi


def test_colorize_translates_legacy_codes():
    assert colorize("&9&l[&3&lServer&9&l]&r Hi") == "§9§l[§3§lServer§9§l]§r Hi"


def test_colorize_lowercases_codes_and_ignores_others():
    assert colorize("&A&Lloud") == "§a§lloud"
    assert colorize("Tom & Jerry &z") == "Tom & Jerry &z"


def test_strip_codes():
    assert strip_codes("§6[&eVB§6] &fhello") == "[VB] hello"


def test_to_ansi():
    rendered = to_ansi("§cRed §lbold§r plain §nunder")
    assert rendered == (
        f"{Fore.LIGHTRED_EX}Red {Style.BRIGHT}bold{Style.RESET_ALL} plain under"
        f"{Style.RESET_ALL}"
    )
