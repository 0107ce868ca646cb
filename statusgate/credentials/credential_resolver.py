from statusgate.models import Credentials


FALLBACK_CREDENTIALS = Credentials(user="cassandra", password="cassandra")


class CredentialResolver:
    """
    Selects the credentials sent with every management-protocol request.

    Two variants exist: the pair read from the credentials directory and a
    fixed fallback pair. A single bit selects between them. The bit is only
    flipped by the poll loop after a cycle in which no query succeeded;
    individual request failures never flip it, and neither does a change
    of the credentials file.
    """

    def __init__(self, fallback: Credentials = FALLBACK_CREDENTIALS) -> None:
        self._fallback = fallback
        self._from_file: Credentials | None = None
        self._use_fallback = False

    @property
    def using_fallback(self) -> bool:
        return self._use_fallback

    @property
    def from_file(self) -> Credentials | None:
        return self._from_file

    def current(self) -> Credentials | None:
        if self._use_fallback:
            return self._fallback

        return self._from_file

    def toggle(self) -> bool:
        self._use_fallback = not self._use_fallback
        return self._use_fallback

    def on_credential_file_changed(self, credentials: Credentials | None) -> None:
        # A missing or invalid file keeps the last good pair.
        if credentials is not None:
            self._from_file = credentials
