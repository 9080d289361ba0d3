# vmpc/mpc_core/config.py
"""
Session configuration.

Environment variables (a .env file in the working directory is loaded first):
  MPC_PARTIES=3          # number of simulated parties (>= 2)
  MPC_SEED=0x0102...     # session seed, hex; per-party PRG seeds are derived from it
  MPC_FIELD_POWER=61     # Mersenne exponent k, p = 2^k - 1
  MPC_LOG_LEVEL=INFO
"""
import logging
import os
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .field import FieldParams

DEFAULT_PARTIES = 3
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s %(message)s"


def _strip0x(s: str) -> str:
    return s[2:] if s.lower().startswith("0x") else s


def parse_seed(value) -> bytes:
    """Accept bytes, a hex string (optionally 0x-prefixed) or a list of byte values."""
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        s = _strip0x(value.strip())
        if len(s) % 2:
            s = "0" + s
        try:
            return bytes.fromhex(s)
        except ValueError:
            raise ValueError(f"seed is not valid hex: {value!r}") from None
    return bytes(value)


class MPCConfig(BaseModel):
    """Immutable parameters of one simulation session."""
    model_config = ConfigDict(frozen=True)

    parties: int = Field(default=DEFAULT_PARTIES, ge=2)
    seed: bytes = b""
    field: FieldParams = Field(default_factory=FieldParams)
    log_level: str = "INFO"

    @field_validator("seed", mode="before")
    @classmethod
    def _parse_seed(cls, v):
        return parse_seed(v)

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v!r}")
        return level

    @property
    def modulus(self) -> int:
        return self.field.modulus

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv: bool = True, **overrides) -> "MPCConfig":
        """Build from MPC_* variables; explicit keyword overrides win."""
        if environ is None:
            if dotenv:
                path = find_dotenv(usecwd=True)
                if path:
                    load_dotenv(path)
            environ = os.environ
        values = {}
        if environ.get("MPC_PARTIES"):
            values["parties"] = int(environ["MPC_PARTIES"])
        if environ.get("MPC_SEED"):
            values["seed"] = environ["MPC_SEED"]
        if environ.get("MPC_FIELD_POWER"):
            values["field"] = FieldParams(power=int(environ["MPC_FIELD_POWER"]))
        if environ.get("MPC_LOG_LEVEL"):
            values["log_level"] = environ["MPC_LOG_LEVEL"]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def configure_logging(level="INFO"):
    """Stream handler on the root logger for scripts, the CLI and the server."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("vmpc").setLevel(level)
