from .credential_resolver import CredentialResolver as CredentialResolver
from .credential_resolver import FALLBACK_CREDENTIALS as FALLBACK_CREDENTIALS
from .credentials_file import parse_credentials_file as parse_credentials_file
from .watcher import CredentialFileWatcher as CredentialFileWatcher
