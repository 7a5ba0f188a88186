# rules/names.py

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 24

NAME_LENGTH_ERROR = f"Name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters."


def name_length(name: str) -> int:
    """Length in UTF-16 code units: characters outside the BMP, such as emoji, count twice."""
    return len(name.encode("utf-16-le")) // 2


def validate_player_name(name) -> tuple[bool, str]:
    """
    Returns (ok, error_message).

    Only the length is checked. Whitespace is not stripped first, so
    "  a" counts as three characters.
    """
    if name is None or name == "":
        return False, "Please enter a name."

    if not isinstance(name, str):
        return False, "Name must be text."

    if not NAME_MIN_LENGTH <= name_length(name) <= NAME_MAX_LENGTH:
        return False, NAME_LENGTH_ERROR

    return True, ""
