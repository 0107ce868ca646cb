import os
from typing import Dict, TypeVar, Union

from dotenv import dotenv_values

from .env import Env

T = TypeVar("T", bound=Env)

PrimaryType = Union[str, int, bool, float, bytes]


def load_env(default: type[T] = Env, env_file: str | None = None) -> T:
    """
    Build settings from a dotenv file and the process environment.

    Only names the settings model declares are read. A variable set in
    the process environment wins over the same name in the file.
    """
    envars = default.types_map()

    if env_file is None:
        env_file = ".env"

    values: Dict[str, PrimaryType] = {}

    if os.path.exists(env_file):
        for envar_name, envar_value in dotenv_values(dotenv_path=env_file).items():
            envar_type = envars.get(envar_name)
            if envar_type and envar_value:
                values[envar_name] = envar_type(envar_value)

    for envar_name, envar_type in envars.items():
        envar_value = os.getenv(envar_name)
        if envar_value:
            values[envar_name] = envar_type(envar_value)

    return default(**values)
