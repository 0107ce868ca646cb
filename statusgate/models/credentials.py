import msgspec


class Credentials(msgspec.Struct, frozen=True):
    user: str
    password: str
