from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Represents a single configuration parameter a client reads from the environment.

    Attributes:
        env_key (str): The raw key, prefixed with "<TYPE>_<ENGINE>_" when read. E.g. "API_KEY".
        val_type (str): "string", "number", "bool" or "list".
        default (str | int | bool | list | None): Value used when the variable is unset.
            None marks the variable as required; reading it unset raises ValueError.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | list | None = None
