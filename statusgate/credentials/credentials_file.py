import pathlib

import orjson

from statusgate.models import Credentials

CREDENTIALS_MARKER = "nodetoolUser"


def parse_credentials_file(path: str) -> Credentials | None:
    """
    Read a JSON credentials file from the watched directory.

    Only files whose ``nodetoolUser`` marker is truthy supply credentials.
    Returns None for any other file. Raises ``OSError`` when the file cannot
    be read and ``orjson.JSONDecodeError`` when it is not valid JSON.
    """
    file_path = pathlib.Path(path)
    if not file_path.is_file():
        return None

    contents = orjson.loads(file_path.read_bytes())
    if not isinstance(contents, dict) or not contents.get(CREDENTIALS_MARKER):
        return None

    user = contents.get("username")
    password = contents.get("password")
    if not isinstance(user, str) or not isinstance(password, str):
        return None

    return Credentials(user=user, password=password)
